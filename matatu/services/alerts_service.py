import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from matatu.core.errors import AuthorizationError, NotFoundError, ValidationError
from matatu.db.session import commit
from matatu.models.alert import DriverAlert
from matatu.models.enums import AlertType, SeverityLevel, enum_values
from matatu.models.user import User
from matatu.schemas.alert import (
    AlertOut, AlertStats, AlertSummary, ExpiredAlert, LocationAlerts, SeverityCount, TypeCount,
)
from matatu.services.alert_filters import AlertFilter
from matatu.services.alert_query import newest_first
from matatu.utils.clock import to_naive_utc, utcnow
from matatu.utils.media import ImageUpload

logger = logging.getLogger(__name__)

STATS_PERIODS = {"1d": 1, "7d": 7, "30d": 30, "90d": 90}
DEFAULT_STATS_PERIOD = "7d"
LOCATION_LIMIT = 100

_datetime_adapter = TypeAdapter(datetime)


# ---------- validation ----------

def parse_alert_type(value: str) -> AlertType:
    try:
        return AlertType(value)
    except ValueError:
        raise ValidationError("Invalid alertType. Must be one of: " + ", ".join(enum_values(AlertType)))


def parse_severity(value: str) -> SeverityLevel:
    try:
        return SeverityLevel(value)
    except ValueError:
        raise ValidationError("Invalid severityLevel. Must be one of: " + ", ".join(enum_values(SeverityLevel)))


def parse_expiry(raw: str, now: datetime) -> datetime:
    """ISO 8601 string -> naive UTC; must be strictly after ``now``."""
    try:
        value = _datetime_adapter.validate_python(raw.strip())
    except PydanticValidationError:
        raise ValidationError("Invalid expiryTime format. Please use ISO 8601 format (YYYY-MM-DDTHH:mm:ss)")
    value = to_naive_utc(value)
    if value <= now:
        raise ValidationError("Expiry time must be in the future")
    return value


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---------- reads ----------

def get_alert(db: Session, alert_id: int) -> DriverAlert:
    alert = (
        db.query(DriverAlert)
        .options(joinedload(DriverAlert.driver))
        .filter(DriverAlert.id == alert_id)
        .first()
    )
    if not alert:
        raise NotFoundError("Alert not found")
    return alert


def get_alert_image(db: Session, alert_id: int) -> Tuple[bytes, str, str]:
    row = (
        db.query(DriverAlert.image_data, DriverAlert.image_mimetype, DriverAlert.image_filename)
        .filter(DriverAlert.id == alert_id, DriverAlert.image_data.is_not(None))
        .first()
    )
    if not row:
        raise NotFoundError("Image not found")
    return row.image_data, row.image_mimetype or "application/octet-stream", row.image_filename or f"alert-{alert_id}"


def alerts_for_location(db: Session, location: str, active_only: bool = True,
                        now: Optional[datetime] = None) -> LocationAlerts:
    now = now or utcnow()
    flt = AlertFilter().contains("location_name", location)
    if active_only:
        flt.active_at(now)
    rows = (
        newest_first(flt.apply(db.query(DriverAlert).options(joinedload(DriverAlert.driver))))
        .limit(LOCATION_LIMIT)
        .all()
    )
    return LocationAlerts(location=location, alerts=[AlertOut.from_alert(a) for a in rows], count=len(rows))


def alert_stats(db: Session, period: str = DEFAULT_STATS_PERIOD, now: Optional[datetime] = None) -> AlertStats:
    if period not in STATS_PERIODS:
        period = DEFAULT_STATS_PERIOD
    now = now or utcnow()
    since = now - timedelta(days=STATS_PERIODS[period])
    in_window = DriverAlert.created_at >= since

    total = db.query(func.count(DriverAlert.id)).filter(in_window).scalar() or 0
    active = AlertFilter().active_at(now).apply(
        db.query(func.count(DriverAlert.id)).filter(in_window)
    ).scalar() or 0

    cnt = func.count(DriverAlert.id).label("count")
    by_type = (
        db.query(DriverAlert.alert_type, cnt).filter(in_window)
        .group_by(DriverAlert.alert_type).order_by(cnt.desc()).all()
    )
    by_severity = (
        db.query(DriverAlert.severity_level, cnt).filter(in_window)
        .group_by(DriverAlert.severity_level).order_by(cnt.desc()).all()
    )
    return AlertStats(
        period=period,
        total_alerts=total,
        active_alerts=active,
        by_type=[TypeCount(alert_type=getattr(t, "value", t), count=c) for t, c in by_type],
        by_severity=[SeverityCount(severity_level=getattr(s, "value", s), count=c) for s, c in by_severity],
    )


# ---------- writes ----------

def create_alert(
    db: Session,
    poster: User,
    *,
    alert_type: Optional[str],
    title: Optional[str],
    description: Optional[str],
    location_name: Optional[str],
    severity_level: Optional[str] = None,
    expiry_time: Optional[str] = None,
    image: Optional[ImageUpload] = None,
    now: Optional[datetime] = None,
) -> DriverAlert:
    """The poster is always the authenticated caller."""
    now = now or utcnow()
    alert_type, title = _clean(alert_type), _clean(title)
    description, location_name = _clean(description), _clean(location_name)
    if not (alert_type and title and description and location_name):
        raise ValidationError(
            "Missing required fields: alertType, title, description, and locationName are required"
        )

    alert = DriverAlert(
        driver_id=poster.id,
        alert_type=parse_alert_type(alert_type),
        title=title,
        description=description,
        location_name=location_name,
        severity_level=parse_severity(_clean(severity_level) or SeverityLevel.medium.value),
        expiry_time=parse_expiry(expiry_time, now) if _clean(expiry_time) else None,
        created_at=now,
    )
    if image:
        alert.image_data = image.data
        alert.image_filename = image.filename
        alert.image_mimetype = image.mimetype

    db.add(alert)
    commit(db)
    logger.info("alert %s created by user %s (%s, %s)", alert.id, poster.id,
                alert.alert_type.value, alert.severity_level.value)
    return get_alert(db, alert.id)


def _owned_alert(db: Session, actor: User, alert_id: int, verb: str) -> DriverAlert:
    alert = get_alert(db, alert_id)
    if alert.driver_id != actor.id:
        raise AuthorizationError(f"You can only {verb} your own alerts")
    return alert


def update_alert(
    db: Session,
    actor: User,
    alert_id: int,
    *,
    alert_type: Optional[str] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    location_name: Optional[str] = None,
    severity_level: Optional[str] = None,
    expiry_time: Optional[str] = None,
    clear_expiry: bool = False,
    image: Optional[ImageUpload] = None,
    now: Optional[datetime] = None,
) -> DriverAlert:
    """
    Partial edit. Only supplied fields change; everything is validated
    before the row is touched.
    """
    now = now or utcnow()
    alert = _owned_alert(db, actor, alert_id, "update")

    changes = {}
    if _clean(alert_type):
        changes["alert_type"] = parse_alert_type(_clean(alert_type))
    for field, value in (("title", title), ("description", description), ("location_name", location_name)):
        if _clean(value):
            changes[field] = _clean(value)
    if _clean(severity_level):
        changes["severity_level"] = parse_severity(_clean(severity_level))
    if _clean(expiry_time):
        changes["expiry_time"] = parse_expiry(expiry_time, now)
    elif clear_expiry:
        changes["expiry_time"] = None
    if image:
        changes.update(image_data=image.data, image_filename=image.filename, image_mimetype=image.mimetype)

    if not changes:
        raise ValidationError("No fields to update")

    for field, value in changes.items():
        setattr(alert, field, value)
    commit(db)
    logger.info("alert %s updated by user %s: %s", alert.id, actor.id, sorted(changes))
    return get_alert(db, alert.id)


def delete_alert(db: Session, actor: User, alert_id: int) -> AlertSummary:
    alert = _owned_alert(db, actor, alert_id, "delete")
    summary = AlertSummary(id=alert.id, title=alert.title,
                           alert_type=alert.alert_type.value, created_at=alert.created_at)
    db.delete(alert)
    commit(db)
    logger.info("alert %s deleted by user %s", alert_id, actor.id)
    return summary


def cleanup_expired(db: Session, now: Optional[datetime] = None) -> List[ExpiredAlert]:
    """Deletes every alert whose expiry is at or before ``now``."""
    now = now or utcnow()
    flt = AlertFilter().expired_at(now)
    expired = flt.apply(db.query(DriverAlert.id, DriverAlert.title, DriverAlert.expiry_time)).all()
    if not expired:
        return []
    ids = [row.id for row in expired]
    db.query(DriverAlert).filter(DriverAlert.id.in_(ids)).delete(synchronize_session=False)
    commit(db)
    logger.info("expired alert cleanup removed %d alert(s)", len(ids))
    return [ExpiredAlert(id=row.id, title=row.title, expiry_time=row.expiry_time) for row in expired]
