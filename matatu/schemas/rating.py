from datetime import datetime
from typing import List, Optional

from matatu.schemas.common import CamelModel, Pagination


class RatingCreate(CamelModel):
    sacco_id: int
    cleanliness_rating: int
    safety_rating: int
    service_rating: int
    review_text: Optional[str] = None


class RatingUpdate(CamelModel):
    cleanliness_rating: Optional[int] = None
    safety_rating: Optional[int] = None
    service_rating: Optional[int] = None
    review_text: Optional[str] = None


class RatingOut(CamelModel):
    id: int
    commuter_id: int
    sacco_id: int
    cleanliness_rating: int
    safety_rating: int
    service_rating: int
    average_rating: float
    review_text: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RatingListItem(RatingOut):
    commuter_firstname: Optional[str] = None
    commuter_lastname: Optional[str] = None
    sacco_name: Optional[str] = None


class RatingPage(CamelModel):
    ratings: List[RatingListItem]
    pagination: Pagination


class RatingAverage(CamelModel):
    sacco_id: int
    avg_cleanliness: float
    avg_safety: float
    avg_service: float
    overall_avg: float
    total_ratings: int
