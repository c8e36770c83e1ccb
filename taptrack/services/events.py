"""
Event recorder.
Validates and appends a single tap/view/submit/contact-save event.
Storage failures are logged and swallowed: tracking is best-effort.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.models import Event, EventType
from .errors import InvalidEventType, ValidationError


logger = structlog.get_logger(__name__)

EVENT_TYPES = tuple(t.value for t in EventType)


@dataclass(frozen=True)
class RequestContext:
    """Request-derived attributes stored alongside events and leads."""

    user_agent: Optional[str] = None
    ip: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_request(cls, request) -> "RequestContext":
        return cls(
            user_agent=request.headers.get("user-agent"),
            ip=client_ip(request.headers),
            path=request.url.path,
        )


def client_ip(headers: Mapping[str, str]) -> Optional[str]:
    """First entry of X-Forwarded-For, trimmed; None when absent."""
    xff = headers.get("x-forwarded-for")
    if not xff:
        return None
    ip = xff.split(",")[0].strip()
    return ip or None


def validate_rep_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("Invalid repId")
    return value


def normalize_event_type(value: Any) -> EventType:
    if not isinstance(value, str):
        raise InvalidEventType()
    try:
        return EventType(value.upper())
    except ValueError:
        raise InvalidEventType()


def record_event(
    db: Session,
    rep_id: Any,
    type: Any,
    meta: Optional[dict] = None,
    user_agent: Optional[str] = None,
    ip: Optional[str] = None,
) -> None:
    # Validation errors reach the caller; storage errors do not
    rep_id = validate_rep_id(rep_id)
    event_type = normalize_event_type(type)
    if meta is not None and not isinstance(meta, dict):
        raise ValidationError("meta must be an object")
    try:
        db.add(Event(rep_id=rep_id, type=event_type.value, meta=meta, user_agent=user_agent, ip=ip))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("event_record_failed", rep_id=rep_id, type=event_type.value, error=str(e))


def record_from_context(db: Session, rep_id: Any, type: Any, context: RequestContext, meta: Optional[dict] = None) -> None:
    record_event(db, rep_id, type, meta=meta, user_agent=context.user_agent, ip=context.ip)
