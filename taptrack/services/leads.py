"""
Lead capture and status workflow.

Status is a label: any of the six values may replace any other. The
workflow order (NEW -> CONTACTED -> INSPECTION_BOOKED -> ESTIMATE_SENT
-> WON/LOST) is documentation only and is not enforced.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..models.models import EventType, Lead, LeadStatus, Rep
from .errors import InvalidLead, NotFound, RepNotFound, StorageError, ValidationError
from .events import RequestContext, record_event


logger = structlog.get_logger(__name__)

LEAD_STATUSES = tuple(s.value for s in LeadStatus)
LEAD_SOURCE = "nfc"
MIN_NAME_LENGTH = 2

# Fields an admin may change on an existing lead
LEAD_UPDATE_FIELDS = ("status", "notes", "phone", "email", "address", "city", "state", "zip")


@dataclass(frozen=True)
class LeadInput:
    rep_id: Any
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_status(value: Any) -> LeadStatus:
    if isinstance(value, LeadStatus):
        return value
    if not isinstance(value, str):
        raise ValidationError("Invalid status")
    try:
        return LeadStatus(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid status; expected one of {', '.join(LEAD_STATUSES)}")


def parse_lead_id(value: Any) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound("Lead not found")


def validate_lead(data: LeadInput) -> Dict[str, Any]:
    """Return cleaned column values or raise InvalidLead."""
    rep_id = data.rep_id
    if isinstance(rep_id, bool) or not isinstance(rep_id, int) or rep_id <= 0:
        raise InvalidLead("Invalid repId")
    name = _clean(data.name) or ""
    if len(name) < MIN_NAME_LENGTH:
        raise InvalidLead("Name is required")
    phone = _clean(data.phone)
    email = _clean(data.email)
    if not phone and not email:
        raise InvalidLead("Phone or email required")
    return {
        "rep_id": rep_id,
        "name": name,
        "phone": phone,
        "email": email,
        "address": _clean(data.address),
        "city": _clean(data.city),
        "state": _clean(data.state),
        "zip": _clean(data.zip),
        "notes": _clean(data.notes),
    }


def capture_lead(db: Session, data: LeadInput, context: Optional[RequestContext] = None) -> Lead:
    context = context or RequestContext()
    values = validate_lead(data)

    rep = db.get(Rep, values["rep_id"])
    if rep is None or not rep.is_active:
        raise RepNotFound()

    lead = Lead(**values, source=LEAD_SOURCE, status=LeadStatus.NEW.value, user_agent=context.user_agent, ip=context.ip)
    try:
        db.add(lead)
        db.commit()
        db.refresh(lead)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("lead_capture_failed", rep_id=values["rep_id"], error=str(e))
        raise StorageError("Could not save lead")

    logger.info("lead_captured", lead_id=str(lead.id), rep_id=lead.rep_id)
    record_event(
        db, lead.rep_id, EventType.SUBMIT.value,
        meta={"leadId": str(lead.id)}, user_agent=context.user_agent, ip=context.ip,
    )
    return lead


def get_lead(db: Session, lead_id: Any) -> Lead:
    lead = db.get(Lead, parse_lead_id(lead_id))
    if lead is None:
        raise NotFound("Lead not found")
    return lead


def _commit(db: Session, lead: Lead, action: str) -> Lead:
    try:
        db.commit()
        db.refresh(lead)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("lead_update_failed", lead_id=str(lead.id), action=action, error=str(e))
        raise StorageError("Could not update lead")
    return lead


def update_status(db: Session, lead_id: Any, new_status: Any) -> Lead:
    status = parse_status(new_status)
    lead = get_lead(db, lead_id)
    previous = lead.status
    lead.status = status.value
    lead = _commit(db, lead, "status")
    logger.info("lead_status_changed", lead_id=str(lead.id), previous=previous, status=lead.status)
    return lead


def update_lead(db: Session, lead_id: Any, changes: Dict[str, Any]) -> Lead:
    """Partial update limited to LEAD_UPDATE_FIELDS; other keys are ignored."""
    data = {k: v for k, v in changes.items() if k in LEAD_UPDATE_FIELDS}
    if "status" in data:
        data["status"] = parse_status(data["status"]).value
    lead = get_lead(db, lead_id)
    for key, value in data.items():
        setattr(lead, key, value if key == "status" else _clean(value))
    return _commit(db, lead, "update")


def list_leads(
    db: Session,
    rep_id: Optional[int] = None,
    status: Optional[str] = None,
    limit: int = 100,
    skip: int = 0,
) -> Tuple[List[Lead], int]:
    filters = []
    if rep_id is not None:
        filters.append(Lead.rep_id == rep_id)
    if status:
        filters.append(Lead.status == parse_status(status).value)
    if limit < 0 or skip < 0:
        raise ValidationError("limit and skip must be non-negative")

    total = db.execute(select(func.count(Lead.id)).where(*filters)).scalar_one()
    stmt = (
        select(Lead)
        .options(selectinload(Lead.rep))
        .where(*filters)
        .order_by(Lead.created_at.desc(), Lead.id.asc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all()), int(total)
