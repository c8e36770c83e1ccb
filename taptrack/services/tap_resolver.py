"""
Tap resolver: decides where a tapped tag lands.

The rep row is read on every call so that a change to ``redirect_url``
applies to the very next tap.
"""
import enum
import re
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.models import EventType, Rep
from .background import best_effort
from .errors import RepNotFound
from .events import RequestContext, record_event


_REP_ID_RE = re.compile(r"^[0-9]{1,10}$")
_MAX_REP_ID = 2**31 - 1


class Destination(str, enum.Enum):
    PROFILE = "PROFILE"
    REDIRECT = "REDIRECT"


@dataclass(frozen=True)
class TapResolution:
    destination: Destination
    rep: Rep
    redirect_url: Optional[str] = None


def parse_rep_id(raw: Any) -> Optional[int]:
    """Positive integer identifier, or None for anything else."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _REP_ID_RE.match(raw):
        value = int(raw)
    else:
        return None
    if value <= 0 or value > _MAX_REP_ID:
        return None
    return value


def load_active_rep(db: Session, raw_id: Any) -> Rep:
    # Malformed, unknown and inactive ids are indistinguishable
    rep_id = parse_rep_id(raw_id)
    if rep_id is None:
        raise RepNotFound()
    rep = db.get(Rep, rep_id)
    if rep is None or not rep.is_active:
        raise RepNotFound()
    return rep


def resolve_tap(db: Session, raw_id: Any, context: Optional[RequestContext] = None) -> TapResolution:
    context = context or RequestContext()
    rep = load_active_rep(db, raw_id)
    redirect_url = (rep.redirect_url or "").strip()
    if redirect_url:
        meta = {"redirected": True, "to": redirect_url}
        if context.path:
            meta["path"] = context.path
        best_effort(
            record_event, db, rep.id, EventType.TAP.value,
            meta=meta, user_agent=context.user_agent, ip=context.ip,
        )
        return TapResolution(Destination.REDIRECT, rep, redirect_url)
    # Profile taps are logged by the page itself once it loads
    return TapResolution(Destination.PROFILE, rep)
