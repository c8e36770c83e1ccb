from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import get_current_user
from ..schemas.events import EventCreate
from ..services import funnel
from ..services.events import RequestContext, record_from_context


router = APIRouter(prefix="/events", tags=["events"])


@router.post("")
def track_event(payload: EventCreate, request: Request, db: Session = Depends(get_db)):
    # 200 even when the write itself was dropped
    record_from_context(db, payload.rep_id, payload.type, RequestContext.from_request(request), meta=payload.meta)
    return {"ok": True}


@router.get("")
def funnel_report(
    rep_id: Optional[int] = Query(default=None, alias="repId", gt=0),
    days: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    _=Depends(get_current_user),
):
    report = funnel.aggregate(db, days=funnel.parse_days(days), rep_id=rep_id)
    return report.to_dict()
