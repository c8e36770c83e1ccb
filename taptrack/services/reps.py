from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.models import Event, EventType, Lead, Rep
from .errors import Conflict, RepNotFound, StorageError, ValidationError
from .funnel import conversion_rate, rep_totals
from .tap_resolver import parse_rep_id


logger = structlog.get_logger(__name__)

REP_CREATE_FIELDS = ("phone", "email", "title", "company", "bio", "photo_url", "cal_link", "redirect_url")
REP_UPDATE_FIELDS = (
    "name", "phone", "email", "title", "company", "bio",
    "photo_url", "cal_link", "is_active", "redirect_url",
)


def _commit(db: Session, rep: Rep, action: str) -> Rep:
    try:
        db.commit()
        db.refresh(rep)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("rep_write_failed", rep_id=rep.id, action=action, error=str(e))
        raise StorageError("Could not save rep")
    return rep


def get_rep(db: Session, rep_id: Any) -> Rep:
    parsed = parse_rep_id(rep_id)
    rep = db.get(Rep, parsed) if parsed is not None else None
    if rep is None:
        raise RepNotFound()
    return rep


def create_rep(db: Session, rep_id: Any, name: Optional[str], **fields: Any) -> Rep:
    parsed = parse_rep_id(rep_id)
    name = (name or "").strip()
    if parsed is None or not name:
        raise ValidationError("id and name are required")
    if db.get(Rep, parsed) is not None:
        raise Conflict("Rep ID already exists")
    values = {k: fields[k] for k in REP_CREATE_FIELDS if fields.get(k)}
    rep = Rep(id=parsed, name=name, is_active=True, **values)
    db.add(rep)
    rep = _commit(db, rep, "create")
    logger.info("rep_created", rep_id=rep.id)
    return rep


def update_rep(db: Session, rep_id: Any, changes: Dict[str, Any]) -> Rep:
    """Partial update limited to REP_UPDATE_FIELDS.

    An empty ``redirect_url`` clears the override; the change is seen by
    the next tap because resolution always reads the row.
    """
    rep = get_rep(db, rep_id)
    for key, value in changes.items():
        if key not in REP_UPDATE_FIELDS:
            continue
        if key == "is_active":
            if value is None:
                continue
            value = bool(value)
        elif key == "name":
            value = (value or "").strip()
            if not value:
                raise ValidationError("name cannot be empty")
        elif isinstance(value, str):
            value = value.strip() or None
        setattr(rep, key, value)
    rep = _commit(db, rep, "update")
    logger.info("rep_updated", rep_id=rep.id, fields=sorted(k for k in changes if k in REP_UPDATE_FIELDS))
    return rep


def deactivate_rep(db: Session, rep_id: Any) -> Rep:
    rep = get_rep(db, rep_id)
    rep.is_active = False
    rep = _commit(db, rep, "deactivate")
    logger.info("rep_deactivated", rep_id=rep.id)
    return rep


def _counts(db: Session, column, rep_ids: List[int]) -> Dict[int, int]:
    if not rep_ids:
        return {}
    stmt = select(column, func.count()).where(column.in_(rep_ids)).group_by(column)
    return {int(r): int(c) for r, c in db.execute(stmt).all()}


def list_reps(db: Session, include_stats: bool = False) -> List[Dict[str, Any]]:
    """Reps ascending by id with lead/event counts and optional all-time funnel stats."""
    reps = list(db.execute(select(Rep).order_by(Rep.id.asc())).scalars().all())
    ids = [r.id for r in reps]
    lead_counts = _counts(db, Lead.rep_id, ids)
    event_counts = _counts(db, Event.rep_id, ids)
    totals = rep_totals(db) if include_stats else {}

    out = []
    for rep in reps:
        row: Dict[str, Any] = {
            "rep": rep,
            "counts": {"leads": lead_counts.get(rep.id, 0), "events": event_counts.get(rep.id, 0)},
        }
        if include_stats:
            by_type = totals.get(rep.id, {})
            taps = by_type.get(EventType.TAP.value, 0)
            submits = by_type.get(EventType.SUBMIT.value, 0)
            row["stats"] = {
                "taps": taps,
                "submits": submits,
                "leads": lead_counts.get(rep.id, 0),
                "conversionRate": conversion_rate(taps, submits),
            }
        out.append(row)
    return out


def rep_detail_counts(db: Session, rep: Rep) -> Dict[str, int]:
    return {
        "leads": _counts(db, Lead.rep_id, [rep.id]).get(rep.id, 0),
        "events": _counts(db, Event.rep_id, [rep.id]).get(rep.id, 0),
    }
