from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from matatu.core.deps import require_role
from matatu.db.session import get_db
from matatu.models.enums import UserRole
from matatu.schemas.transit import (
    Operation, RouteIn, RouteOut, SaccoDetail, SaccoIn, SaccoOut, StageIn, StageOut,
)
from matatu.services import transit_service

router = APIRouter(tags=["transit"])

admin_only = [Depends(require_role(UserRole.admin))]


@router.get("/stages", response_model=List[StageOut])
def list_stages(db: Session = Depends(get_db)):
    return transit_service.list_stages(db)


@router.get("/stages/{stage_id}", response_model=StageOut)
def get_stage(stage_id: int, db: Session = Depends(get_db)):
    return transit_service.get_stage(db, stage_id)


@router.post("/stages", response_model=StageOut, status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def create_stage(payload: StageIn, db: Session = Depends(get_db)):
    return transit_service.create_stage(db, payload)


@router.get("/routes", response_model=List[RouteOut])
def list_routes(db: Session = Depends(get_db)):
    return transit_service.list_routes(db)


@router.get("/routes/{route_id}", response_model=RouteOut)
def get_route(route_id: int, db: Session = Depends(get_db)):
    return transit_service.get_route(db, route_id)


@router.post("/routes", response_model=RouteOut, status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def create_route(payload: RouteIn, db: Session = Depends(get_db)):
    return transit_service.create_route(db, payload)


@router.get("/saccos", response_model=List[SaccoOut])
def list_saccos(db: Session = Depends(get_db)):
    return transit_service.list_saccos(db)


# before /saccos/{sacco_id} so "details" is not read as an id
@router.get("/saccos/details", response_model=List[SaccoDetail])
def sacco_details(db: Session = Depends(get_db)):
    return transit_service.sacco_details(db)


@router.get("/saccos/{sacco_id}", response_model=SaccoOut)
def get_sacco(sacco_id: int, db: Session = Depends(get_db)):
    return transit_service.get_sacco(db, sacco_id)


@router.post("/saccos", response_model=SaccoOut, status_code=status.HTTP_201_CREATED, dependencies=admin_only)
def create_sacco(payload: SaccoIn, db: Session = Depends(get_db)):
    return transit_service.create_sacco(db, payload)


@router.get("/operations", response_model=List[Operation])
def operations(db: Session = Depends(get_db)):
    return transit_service.operations(db)
