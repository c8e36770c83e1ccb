from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.models import DealPage
from .errors import StorageError


DEAL_PAGE_ID = 1
DEAL_PAGE_FIELDS = (
    "is_live", "badge", "headline", "subheadline", "body",
    "cta_text", "cta_url", "company_name", "logo_url",
)


def get_deal_page(db: Session) -> Optional[DealPage]:
    return db.get(DealPage, DEAL_PAGE_ID)


def upsert_deal_page(db: Session, changes: Dict[str, Any]) -> DealPage:
    page = get_deal_page(db)
    if page is None:
        page = DealPage(id=DEAL_PAGE_ID)
        db.add(page)
    for key, value in changes.items():
        if key in DEAL_PAGE_FIELDS:
            setattr(page, key, bool(value) if key == "is_live" else value)
    try:
        db.commit()
        db.refresh(page)
    except SQLAlchemyError:
        db.rollback()
        raise StorageError("Could not save deal page")
    return page
