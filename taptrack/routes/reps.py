from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import get_current_user
from ..schemas.leads import LeadOut
from ..schemas.reps import RepCreate, RepOut, RepUpdate
from ..schemas.tags import TagOut
from ..services import reps as rep_service


router = APIRouter(prefix="/reps", tags=["reps"])

RECENT_LEADS = 20


@router.get("")
def list_reps(stats: bool = False, db: Session = Depends(get_db), _=Depends(get_current_user)):
    out = []
    for row in rep_service.list_reps(db, include_stats=stats):
        rec = RepOut.model_validate(row["rep"]).to_json()
        rec["_count"] = row["counts"]
        if "stats" in row:
            rec["stats"] = row["stats"]
        out.append(rec)
    return {"reps": out}


@router.post("", status_code=201)
def create_rep(payload: RepCreate, db: Session = Depends(get_db), _=Depends(get_current_user)):
    fields = payload.model_dump(exclude={"id", "name"})
    rep = rep_service.create_rep(db, payload.id, payload.name, **fields)
    return {"rep": RepOut.model_validate(rep).to_json()}


@router.get("/{rep_id}")
def get_rep(rep_id: str, db: Session = Depends(get_db), _=Depends(get_current_user)):
    rep = rep_service.get_rep(db, rep_id)
    rec = RepOut.model_validate(rep).to_json()
    rec["leads"] = [LeadOut.model_validate(lead).to_json() for lead in rep.leads[:RECENT_LEADS]]
    rec["tags"] = [TagOut.model_validate(t).to_json() for t in rep.tags]
    rec["_count"] = rep_service.rep_detail_counts(db, rep)
    return {"rep": rec}


@router.patch("/{rep_id}")
def update_rep(rep_id: str, payload: RepUpdate, db: Session = Depends(get_db), _=Depends(get_current_user)):
    rep = rep_service.update_rep(db, rep_id, payload.model_dump(exclude_unset=True))
    return {"rep": RepOut.model_validate(rep).to_json()}


@router.delete("/{rep_id}")
def deactivate_rep(rep_id: str, db: Session = Depends(get_db), _=Depends(get_current_user)):
    rep = rep_service.deactivate_rep(db, rep_id)
    return {"rep": RepOut.model_validate(rep).to_json()}
