from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from matatu.core.config_env import settings
from matatu.core.errors import ValidationError
from matatu.models.alert import DriverAlert
from matatu.schemas.alert import AlertOut, AlertPage
from matatu.schemas.common import Pagination
from matatu.services.alert_filters import AlertFilter
from matatu.utils.clock import utcnow


@dataclass
class AlertQuery:
    page: int = 1
    limit: int = settings.ALERTS_PAGE_SIZE
    alert_type: Optional[str] = None
    severity_level: Optional[str] = None
    location: Optional[str] = None
    poster_id: Optional[int] = None
    active_only: bool = True


def newest_first(query):
    # id breaks created_at ties so consecutive pages never overlap
    return query.order_by(DriverAlert.created_at.desc(), DriverAlert.id.desc())


def query_alerts(db: Session, q: AlertQuery, now: Optional[datetime] = None) -> AlertPage:
    """
    One page of alerts matching every supplied filter, newest first.
    The total is counted once over the same filter; a page past the end
    is simply empty.
    """
    if q.page < 1 or q.limit < 1:
        raise ValidationError("page and limit must be positive")
    now = now or utcnow()
    flt = AlertFilter.for_listing(
        alert_type=q.alert_type,
        severity_level=q.severity_level,
        location=q.location,
        poster_id=q.poster_id,
        active_only=q.active_only,
        now=now,
    )
    base = flt.apply(db.query(DriverAlert))
    total = base.count()
    rows = (
        newest_first(base.options(joinedload(DriverAlert.driver)))
        .offset((q.page - 1) * q.limit)
        .limit(q.limit)
        .all()
    )
    return AlertPage(
        alerts=[AlertOut.from_alert(a) for a in rows],
        pagination=Pagination.build(q.page, q.limit, total),
    )
