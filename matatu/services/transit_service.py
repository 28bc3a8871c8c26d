from typing import List

from sqlalchemy.orm import Session

from matatu.core.errors import NotFoundError, ValidationError
from matatu.db.session import commit
from matatu.models.transit import Route, Sacco, Stage
from matatu.schemas.transit import Operation, RouteIn, SaccoDetail, SaccoIn, StageIn


def _get(db: Session, model, pk_col, pk: int, label: str):
    obj = db.query(model).filter(pk_col == pk).first()
    if not obj:
        raise NotFoundError(f"{label} not found")
    return obj


def get_stage(db: Session, stage_id: int) -> Stage:
    return _get(db, Stage, Stage.stage_id, stage_id, "Stage")


def get_route(db: Session, route_id: int) -> Route:
    return _get(db, Route, Route.route_id, route_id, "Route")


def get_sacco(db: Session, sacco_id: int) -> Sacco:
    return _get(db, Sacco, Sacco.sacco_id, sacco_id, "Sacco")


def list_stages(db: Session) -> List[Stage]:
    return db.query(Stage).order_by(Stage.stage_id).all()


def list_routes(db: Session) -> List[Route]:
    return db.query(Route).order_by(Route.route_id).all()


def list_saccos(db: Session) -> List[Sacco]:
    return db.query(Sacco).order_by(Sacco.sacco_id).all()


def create_stage(db: Session, payload: StageIn) -> Stage:
    if not payload.name.strip():
        raise ValidationError("Stage name is required")
    stage = Stage(name=payload.name.strip(), latitude=payload.latitude, longitude=payload.longitude)
    db.add(stage)
    commit(db)
    return stage


def create_route(db: Session, payload: RouteIn) -> Route:
    if not payload.display_name.strip():
        raise ValidationError("Route display_name is required")
    route = Route(display_name=payload.display_name.strip())
    db.add(route)
    commit(db)
    return route


def create_sacco(db: Session, payload: SaccoIn) -> Sacco:
    if not payload.name.strip():
        raise ValidationError("Sacco name is required")
    if payload.route_id is not None:
        get_route(db, payload.route_id)
    if payload.sacco_stage_id is not None:
        get_stage(db, payload.sacco_stage_id)
    sacco = Sacco(
        name=payload.name.strip(),
        base_fare_range=payload.base_fare_range,
        route_id=payload.route_id,
        sacco_stage_id=payload.sacco_stage_id,
    )
    db.add(sacco)
    commit(db)
    return sacco


def sacco_details(db: Session) -> List[SaccoDetail]:
    rows = (
        db.query(
            Sacco.sacco_id, Sacco.name, Sacco.base_fare_range,
            Route.route_id, Route.display_name.label("route_name"),
            Stage.stage_id, Stage.name.label("stage_name"),
        )
        .outerjoin(Route, Sacco.route_id == Route.route_id)
        .outerjoin(Stage, Sacco.sacco_stage_id == Stage.stage_id)
        .order_by(Sacco.sacco_id)
        .all()
    )
    return [SaccoDetail(**r._asdict()) for r in rows]


def operations(db: Session) -> List[Operation]:
    """Saccos with the route they run and the stage they load from."""
    rows = (
        db.query(
            Sacco.sacco_id, Sacco.name.label("sacco_name"), Sacco.base_fare_range,
            Route.display_name.label("route_name"),
            Stage.name.label("from_stage"),
            Stage.latitude.label("stage_latitude"), Stage.longitude.label("stage_longitude"),
        )
        .join(Route, Sacco.route_id == Route.route_id)
        .join(Stage, Sacco.sacco_stage_id == Stage.stage_id)
        .order_by(Sacco.sacco_id)
        .all()
    )
    return [Operation(**r._asdict()) for r in rows]
