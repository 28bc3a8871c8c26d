import logging
import re
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from matatu.core.errors import MatatuError, NotFoundError, ValidationError
from matatu.db.session import commit
from matatu.models.lost_item import LostItem
from matatu.utils.media import ImageUpload, path_for_url, public_url, remove_file, save_image

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
FOUND_SUFFIX = " [FOUND] Item has been found"


def _parse_date(raw: str) -> date:
    if not DATE_RE.match(raw):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")


def list_items(db: Session) -> List[LostItem]:
    return db.query(LostItem).order_by(LostItem.created_at.desc(), LostItem.id.desc()).all()


def get_item(db: Session, item_id: int) -> LostItem:
    item = db.query(LostItem).filter(LostItem.id == item_id).first()
    if not item:
        raise NotFoundError("Lost item not found")
    return item


def create_item(
    db: Session,
    *,
    lostitem: Optional[str],
    route: Optional[str],
    date_str: Optional[str],
    sacco: Optional[str],
    description: Optional[str] = None,
    image: Optional[ImageUpload] = None,
) -> LostItem:
    """
    The image is written first so the row can carry its URL; if the row is
    rejected afterwards the file goes with it.
    """
    saved = save_image(image) if image else None
    try:
        fields = {"lostitem": lostitem, "route": route, "date": date_str, "sacco": sacco}
        missing = [k for k, v in fields.items() if not (v and v.strip())]
        if missing:
            raise ValidationError("Missing required fields: lostitem, route, date, and sacco are required")
        item = LostItem(
            lostitem=lostitem.strip(),
            route=route.strip(),
            date=_parse_date(date_str.strip()),
            sacco=sacco.strip(),
            description=(description or "").strip() or None,
            image_url=public_url(saved) if saved else None,
        )
        db.add(item)
        commit(db)
    except MatatuError:
        remove_file(saved)
        raise
    logger.info("lost item %s reported (image=%s)", item.id, bool(saved))
    return item


def mark_found(db: Session, item_id: int) -> LostItem:
    item = get_item(db, item_id)
    if not (item.description or "").endswith(FOUND_SUFFIX):
        item.description = (item.description or "") + FOUND_SUFFIX
    commit(db)
    return item


def delete_item(db: Session, item_id: int) -> LostItem:
    item = get_item(db, item_id)
    image_path = path_for_url(item.image_url)
    db.delete(item)
    commit(db)
    remove_file(image_path)
    logger.info("lost item %s deleted", item_id)
    return item
