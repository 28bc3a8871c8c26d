import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from matatu.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from matatu.db.session import commit
from matatu.models.enums import RatingSort, UserRole
from matatu.models.rating import Rating
from matatu.models.transit import Sacco
from matatu.models.user import User
from matatu.schemas.common import Pagination
from matatu.schemas.rating import RatingAverage, RatingCreate, RatingListItem, RatingPage, RatingUpdate
from matatu.services.transit_service import get_sacco

logger = logging.getLogger(__name__)

DIMENSIONS = ("cleanliness_rating", "safety_rating", "service_rating")

_ORDER = {
    RatingSort.newest: (Rating.created_at.desc(), Rating.id.desc()),
    RatingSort.highest: (Rating.average_rating.desc(), Rating.id.desc()),
    RatingSort.lowest: (Rating.average_rating.asc(), Rating.id.desc()),
}


def _check_score(value: Optional[int]) -> None:
    if value is not None and not (1 <= value <= 5):
        raise ValidationError("Ratings must be between 1 and 5")


def _recompute(rating: Rating) -> None:
    rating.average_rating = round(sum(getattr(rating, d) for d in DIMENSIONS) / len(DIMENSIONS), 2)


def get_rating(db: Session, rating_id: int) -> Rating:
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        raise NotFoundError("Rating not found")
    return rating


def list_ratings(
    db: Session,
    *,
    sacco_id: Optional[int] = None,
    commuter_id: Optional[int] = None,
    sort: str = RatingSort.newest.value,
    page: int = 1,
    limit: int = 10,
) -> RatingPage:
    try:
        order = _ORDER[RatingSort(sort)]
    except ValueError:
        order = _ORDER[RatingSort.newest]

    base = db.query(Rating)
    if sacco_id is not None:
        base = base.filter(Rating.sacco_id == sacco_id)
    if commuter_id is not None:
        base = base.filter(Rating.commuter_id == commuter_id)
    total = base.count()

    rows = (
        base.join(User, Rating.commuter_id == User.id)
        .join(Sacco, Rating.sacco_id == Sacco.sacco_id)
        .with_entities(Rating, User.firstname, User.lastname, Sacco.name)
        .order_by(*order)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    items = [
        RatingListItem.model_validate(r).model_copy(
            update={"commuter_firstname": first, "commuter_lastname": last, "sacco_name": sacco_name}
        )
        for r, first, last, sacco_name in rows
    ]
    return RatingPage(ratings=items, pagination=Pagination.build(page, limit, total))


def sacco_average(db: Session, sacco_id: int) -> RatingAverage:
    row = db.query(
        func.avg(Rating.cleanliness_rating),
        func.avg(Rating.safety_rating),
        func.avg(Rating.service_rating),
        func.avg(Rating.average_rating),
        func.count(Rating.id),
    ).filter(Rating.sacco_id == sacco_id).one()
    cleanliness, safety, service, overall, total = row
    if not total:
        raise NotFoundError("No ratings found for this sacco")
    return RatingAverage(
        sacco_id=sacco_id,
        avg_cleanliness=round(float(cleanliness), 1),
        avg_safety=round(float(safety), 1),
        avg_service=round(float(service), 1),
        overall_avg=round(float(overall), 1),
        total_ratings=int(total),
    )


def create_rating(db: Session, commuter: User, payload: RatingCreate) -> Rating:
    for d in DIMENSIONS:
        _check_score(getattr(payload, d))
    get_sacco(db, payload.sacco_id)
    exists = db.query(Rating.id).filter(
        Rating.commuter_id == commuter.id, Rating.sacco_id == payload.sacco_id
    ).first()
    if exists:
        raise ConflictError("You have already rated this sacco")
    rating = Rating(
        commuter_id=commuter.id,
        sacco_id=payload.sacco_id,
        cleanliness_rating=payload.cleanliness_rating,
        safety_rating=payload.safety_rating,
        service_rating=payload.service_rating,
        review_text=payload.review_text or None,
    )
    _recompute(rating)
    db.add(rating)
    commit(db)
    logger.info("rating %s for sacco %s by user %s", rating.id, rating.sacco_id, commuter.id)
    return rating


def update_rating(db: Session, actor: User, rating_id: int, payload: RatingUpdate) -> Rating:
    rating = get_rating(db, rating_id)
    if rating.commuter_id != actor.id:
        raise AuthorizationError("You can only update your own ratings")
    changes = payload.model_dump(exclude_unset=True)
    for d in DIMENSIONS:
        if d in changes:
            if changes[d] is None:
                raise ValidationError("Ratings must be between 1 and 5")
            _check_score(changes[d])
    for name, value in changes.items():
        setattr(rating, name, value)
    _recompute(rating)
    commit(db)
    return rating


def delete_rating(db: Session, actor: User, rating_id: int) -> None:
    rating = get_rating(db, rating_id)
    if rating.commuter_id != actor.id and actor.role != UserRole.admin:
        raise AuthorizationError("You can only delete your own ratings")
    db.delete(rating)
    commit(db)
