from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import get_current_user
from ..schemas.deal_page import DealPageOut, DealPageUpdate
from ..services import deal_page as deal_page_service


router = APIRouter(prefix="/deal-page", tags=["deal-page"])


@router.get("")
def get_deal_page(db: Session = Depends(get_db)):
    page = deal_page_service.get_deal_page(db)
    return {"page": DealPageOut.model_validate(page).to_json() if page else None}


@router.put("")
def update_deal_page(payload: DealPageUpdate, db: Session = Depends(get_db), _=Depends(get_current_user)):
    page = deal_page_service.upsert_deal_page(db, payload.model_dump(exclude_unset=True))
    return {"page": DealPageOut.model_validate(page).to_json()}
