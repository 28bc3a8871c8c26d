from typing import Optional
from pydantic import BaseModel, ConfigDict

class StageIn(BaseModel):
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class StageOut(StageIn):
    stage_id: int
    model_config = ConfigDict(from_attributes=True)

class RouteIn(BaseModel):
    display_name: str

class RouteOut(RouteIn):
    route_id: int
    model_config = ConfigDict(from_attributes=True)

class SaccoIn(BaseModel):
    name: str
    base_fare_range: Optional[str] = None
    route_id: Optional[int] = None
    sacco_stage_id: Optional[int] = None

class SaccoOut(SaccoIn):
    sacco_id: int
    model_config = ConfigDict(from_attributes=True)

class SaccoDetail(BaseModel):
    sacco_id: int
    name: str
    base_fare_range: Optional[str] = None
    route_id: Optional[int] = None
    route_name: Optional[str] = None
    stage_id: Optional[int] = None
    stage_name: Optional[str] = None

class Operation(BaseModel):
    sacco_id: int
    sacco_name: str
    base_fare_range: Optional[str] = None
    route_name: str
    from_stage: str
    stage_latitude: Optional[float] = None
    stage_longitude: Optional[float] = None
