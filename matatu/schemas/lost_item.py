import datetime as dt
from typing import Optional
from pydantic import BaseModel, ConfigDict

class LostItemOut(BaseModel):
    id: int
    lostitem: str
    route: str
    date: dt.date
    sacco: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)

class LostItemEnvelope(BaseModel):
    message: str
    item: LostItemOut
