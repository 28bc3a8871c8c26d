# matatu/api/v1/alerts.py
from typing import Optional, Set

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from matatu.core.config_env import settings
from matatu.core.deps import get_current_user, require_role
from matatu.db.session import get_db
from matatu.models.enums import UserRole
from matatu.models.user import User
from matatu.schemas.alert import (
    AlertDeleted, AlertEnvelope, AlertOut, AlertPage, AlertStats, CleanupResult, LocationAlerts,
)
from matatu.services import alerts_service
from matatu.services.alert_query import AlertQuery, query_alerts
from matatu.services.alerts_service import DEFAULT_STATS_PERIOD
from matatu.utils.media import read_image_upload

router = APIRouter(prefix="/alerts", tags=["alerts"])

IMAGE_CACHE = "public, max-age=86400"


async def _form_keys(request: Request) -> Set[str]:
    # FastAPI hands an empty form value to the handler as the default,
    # so presence has to be read off the parsed form itself
    form = await request.form()
    return set(form.keys())


@router.get("", response_model=AlertPage)
def list_alerts(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ALERTS_PAGE_SIZE, ge=1),
    alert_type: Optional[str] = Query(None, alias="alertType"),
    severity_level: Optional[str] = Query(None, alias="severityLevel"),
    location: Optional[str] = Query(None),
    poster_id: Optional[int] = Query(None, alias="posterId"),
    active_only: bool = Query(True, alias="activeOnly"),
    db: Session = Depends(get_db),
):
    q = AlertQuery(
        page=page,
        limit=min(limit, settings.ALERTS_MAX_PAGE_SIZE),
        alert_type=alert_type,
        severity_level=severity_level,
        location=location,
        poster_id=poster_id,
        active_only=active_only,
    )
    return query_alerts(db, q)


@router.get("/stats", response_model=AlertStats)
def alert_stats(period: str = Query(DEFAULT_STATS_PERIOD), db: Session = Depends(get_db)):
    return alerts_service.alert_stats(db, period)


@router.get("/location/{location}", response_model=LocationAlerts)
def alerts_for_location(
    location: str,
    active_only: bool = Query(True, alias="activeOnly"),
    db: Session = Depends(get_db),
):
    return alerts_service.alerts_for_location(db, location, active_only=active_only)


@router.post("/cleanup", response_model=CleanupResult)
def cleanup_expired(db: Session = Depends(get_db), _: User = Depends(require_role(UserRole.admin))):
    removed = alerts_service.cleanup_expired(db)
    return CleanupResult(
        message=f"Cleaned up {len(removed)} expired alerts",
        deleted_count=len(removed),
        deleted=removed,
    )


@router.get("/{alert_id}", response_model=AlertOut)
def get_alert(alert_id: int, db: Session = Depends(get_db)):
    return AlertOut.from_alert(alerts_service.get_alert(db, alert_id))


@router.get("/{alert_id}/image")
def get_alert_image(alert_id: int, db: Session = Depends(get_db)):
    data, mimetype, filename = alerts_service.get_alert_image(db, alert_id)
    return Response(
        content=data,
        media_type=mimetype,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"',
            "Cache-Control": IMAGE_CACHE,
        },
    )


@router.post("", response_model=AlertEnvelope, status_code=status.HTTP_201_CREATED)
def create_alert(
    alert_type: Optional[str] = Form(None, alias="alertType"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location_name: Optional[str] = Form(None, alias="locationName"),
    severity_level: Optional[str] = Form(None, alias="severityLevel"),
    expiry_time: Optional[str] = Form(None, alias="expiryTime"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(require_role(UserRole.driver, UserRole.admin)),
):
    alert = alerts_service.create_alert(
        db,
        user,
        alert_type=alert_type,
        title=title,
        description=description,
        location_name=location_name,
        severity_level=severity_level,
        expiry_time=expiry_time,
        image=read_image_upload(image),
    )
    return AlertEnvelope(message="Alert created successfully", alert=AlertOut.from_alert(alert))


@router.put("/{alert_id}", response_model=AlertEnvelope)
def update_alert(
    alert_id: int,
    alert_type: Optional[str] = Form(None, alias="alertType"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location_name: Optional[str] = Form(None, alias="locationName"),
    severity_level: Optional[str] = Form(None, alias="severityLevel"),
    expiry_time: Optional[str] = Form(None, alias="expiryTime"),
    clear_expiry: bool = Form(False, alias="clearExpiry"),
    image: Optional[UploadFile] = File(None),
    sent: Set[str] = Depends(_form_keys),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    alert = alerts_service.update_alert(
        db,
        user,
        alert_id,
        alert_type=alert_type,
        title=title,
        description=description,
        location_name=location_name,
        severity_level=severity_level,
        expiry_time=expiry_time,
        clear_expiry=clear_expiry or ("expiryTime" in sent and not expiry_time),
        image=read_image_upload(image),
    )
    return AlertEnvelope(message="Alert updated successfully", alert=AlertOut.from_alert(alert))


@router.delete("/{alert_id}", response_model=AlertDeleted)
def delete_alert(alert_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    summary = alerts_service.delete_alert(db, user, alert_id)
    return AlertDeleted(message="Alert deleted successfully", alert=summary)
