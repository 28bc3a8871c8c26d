from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from matatu.core.deps import get_current_user, require_role
from matatu.db.session import get_db
from matatu.models.enums import UserRole
from matatu.models.user import User
from matatu.schemas.lost_item import LostItemEnvelope, LostItemOut
from matatu.services import lost_items_service
from matatu.utils.media import read_image_upload

router = APIRouter(prefix="/lost-items", tags=["lost-items"])


@router.get("", response_model=List[LostItemOut])
def list_items(db: Session = Depends(get_db)):
    return lost_items_service.list_items(db)


@router.get("/{item_id}", response_model=LostItemOut)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return lost_items_service.get_item(db, item_id)


@router.post("", response_model=LostItemEnvelope, status_code=status.HTTP_201_CREATED)
def report_item(
    lostitem: Optional[str] = Form(None),
    route: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    sacco: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    item = lost_items_service.create_item(
        db,
        lostitem=lostitem,
        route=route,
        date_str=date,
        sacco=sacco,
        description=description,
        image=read_image_upload(image),
    )
    return LostItemEnvelope(message="Lost item reported successfully", item=LostItemOut.model_validate(item))


@router.post("/{item_id}/found", response_model=LostItemEnvelope)
def mark_found(item_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    item = lost_items_service.mark_found(db, item_id)
    return LostItemEnvelope(message="Item marked as found", item=LostItemOut.model_validate(item))


@router.delete("/{item_id}", response_model=LostItemEnvelope,
               dependencies=[Depends(require_role(UserRole.admin))])
def delete_item(item_id: int, db: Session = Depends(get_db)):
    item = lost_items_service.delete_item(db, item_id)
    return LostItemEnvelope(message="Lost item deleted successfully", item=LostItemOut.model_validate(item))
