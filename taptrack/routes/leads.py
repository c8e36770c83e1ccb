from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import get_current_user
from ..schemas.leads import LeadCreate, LeadOut, LeadUpdate
from ..services import leads as lead_service
from ..services.background import best_effort
from ..services.events import RequestContext
from ..services.notifications import LeadNotice, send_lead_notification


router = APIRouter(prefix="/leads", tags=["leads"])


@router.post("")
def capture_lead(payload: LeadCreate, request: Request, background: BackgroundTasks, db: Session = Depends(get_db)):
    data = lead_service.LeadInput(**payload.model_dump())
    lead = lead_service.capture_lead(db, data, RequestContext.from_request(request))
    # Runs after the response is sent; never affects it
    background.add_task(best_effort, send_lead_notification, LeadNotice.from_lead(lead, lead.rep))
    return {"ok": True, "leadId": str(lead.id)}


@router.get("")
def list_leads(
    rep_id: Optional[int] = Query(default=None, alias="repId", gt=0),
    status: Optional[str] = Query(default=None),
    limit: int = Query(default=100, ge=0, le=1000),
    skip: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _=Depends(get_current_user),
):
    rows, total = lead_service.list_leads(db, rep_id=rep_id, status=status, limit=limit, skip=skip)
    return {"leads": [LeadOut.model_validate(r).to_json() for r in rows], "total": total}


@router.get("/{lead_id}")
def get_lead(lead_id: str, db: Session = Depends(get_db), _=Depends(get_current_user)):
    lead = lead_service.get_lead(db, lead_id)
    return {"lead": LeadOut.model_validate(lead).to_json()}


@router.patch("/{lead_id}")
def update_lead(lead_id: str, payload: LeadUpdate, db: Session = Depends(get_db), _=Depends(get_current_user)):
    changes = payload.model_dump(exclude_unset=True)
    if set(changes) == {"status"}:
        lead = lead_service.update_status(db, lead_id, changes["status"])
    else:
        lead = lead_service.update_lead(db, lead_id, changes)
    return {"lead": LeadOut.model_validate(lead).to_json()}
