from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from matatu.core.deps import get_current_user
from matatu.db.session import get_db
from matatu.models.enums import RatingSort
from matatu.models.user import User
from matatu.schemas.common import MessageOut
from matatu.schemas.rating import RatingAverage, RatingCreate, RatingOut, RatingPage, RatingUpdate
from matatu.services import ratings_service

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.get("", response_model=RatingPage)
def list_ratings(
    sacco_id: Optional[int] = Query(None, alias="saccoId"),
    commuter_id: Optional[int] = Query(None, alias="commuterId"),
    sort: str = Query(RatingSort.newest.value),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return ratings_service.list_ratings(
        db, sacco_id=sacco_id, commuter_id=commuter_id, sort=sort, page=page, limit=limit
    )


@router.get("/average/{sacco_id}", response_model=RatingAverage)
def sacco_average(sacco_id: int, db: Session = Depends(get_db)):
    return ratings_service.sacco_average(db, sacco_id)


@router.post("", response_model=RatingOut, status_code=status.HTTP_201_CREATED)
def create_rating(payload: RatingCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return ratings_service.create_rating(db, user, payload)


@router.put("/{rating_id}", response_model=RatingOut)
def update_rating(
    rating_id: int,
    payload: RatingUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return ratings_service.update_rating(db, user, rating_id, payload)


@router.delete("/{rating_id}", response_model=MessageOut)
def delete_rating(rating_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ratings_service.delete_rating(db, user, rating_id)
    return MessageOut(message="Rating deleted successfully")
