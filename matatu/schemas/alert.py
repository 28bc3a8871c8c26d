from datetime import datetime
from typing import List, Optional

from matatu.models.alert import DriverAlert
from matatu.schemas.common import CamelModel, Pagination


class AlertOut(CamelModel):
    id: int
    poster_id: int
    alert_type: str
    title: str
    description: str
    location_name: str
    severity_level: str
    image_filename: Optional[str] = None
    image_mimetype: Optional[str] = None
    has_image: bool = False
    expiry_time: Optional[datetime] = None
    created_at: datetime
    # poster display fields
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    username: Optional[str] = None

    @classmethod
    def from_alert(cls, alert: DriverAlert) -> "AlertOut":
        driver = alert.driver
        return cls(
            id=alert.id,
            poster_id=alert.driver_id,
            alert_type=getattr(alert.alert_type, "value", alert.alert_type),
            title=alert.title,
            description=alert.description,
            location_name=alert.location_name,
            severity_level=getattr(alert.severity_level, "value", alert.severity_level),
            image_filename=alert.image_filename,
            image_mimetype=alert.image_mimetype,
            has_image=alert.has_image,
            expiry_time=alert.expiry_time,
            created_at=alert.created_at,
            firstname=driver.firstname if driver else None,
            lastname=driver.lastname if driver else None,
            username=driver.username if driver else None,
        )


class AlertPage(CamelModel):
    alerts: List[AlertOut]
    pagination: Pagination


class AlertEnvelope(CamelModel):
    message: str
    alert: AlertOut


class AlertSummary(CamelModel):
    id: int
    title: str
    alert_type: str
    created_at: datetime


class AlertDeleted(CamelModel):
    message: str
    alert: AlertSummary


class ExpiredAlert(CamelModel):
    id: int
    title: str
    expiry_time: Optional[datetime] = None


class CleanupResult(CamelModel):
    message: str
    deleted_count: int
    deleted: List[ExpiredAlert]


class LocationAlerts(CamelModel):
    location: str
    alerts: List[AlertOut]
    count: int


class TypeCount(CamelModel):
    alert_type: str
    count: int


class SeverityCount(CamelModel):
    severity_level: str
    count: int


class AlertStats(CamelModel):
    period: str
    total_alerts: int
    active_alerts: int
    by_type: List[TypeCount]
    by_severity: List[SeverityCount]
