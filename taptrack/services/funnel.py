"""
Funnel aggregator.

Reads the event log and produces, for a trailing window ending now:
  * summary counts of TAP / VIEW / SUBMIT with a conversion rate
  * a flat (rep_id, type, count) breakdown
  * a daily TAP series (UTC days, zero days omitted, ascending)

Nothing is persisted; the same log and window always yield the same report.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..config import settings
from ..models.models import Event, EventType
from .errors import ValidationError


MAX_WINDOW_DAYS = 3650


@dataclass(frozen=True)
class FunnelSummary:
    taps: int = 0
    views: int = 0
    submits: int = 0
    conversion_rate: str = "0"

    def to_dict(self) -> dict:
        return {
            "taps": self.taps,
            "views": self.views,
            "submits": self.submits,
            "conversionRate": self.conversion_rate,
        }


@dataclass(frozen=True)
class RepTypeCount:
    rep_id: int
    type: str
    count: int

    def to_dict(self) -> dict:
        return {"repId": self.rep_id, "type": self.type, "count": self.count}


@dataclass(frozen=True)
class DailyPoint:
    date: str
    count: int

    def to_dict(self) -> dict:
        return {"date": self.date, "count": self.count}


@dataclass(frozen=True)
class FunnelReport:
    summary: FunnelSummary
    by_rep: List[RepTypeCount] = field(default_factory=list)
    daily_chart: List[DailyPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "byRep": [row.to_dict() for row in self.by_rep],
            "dailyChart": [point.to_dict() for point in self.daily_chart],
        }


def conversion_rate(taps: int, submits: int) -> str:
    """submits / taps as a percentage with one decimal; "0" when there are no taps."""
    if taps <= 0:
        return "0"
    return f"{submits / taps * 100:.1f}"


def parse_days(value, default: Optional[int] = None) -> int:
    if value is None or value == "":
        return default if default is not None else settings.analytics_default_days
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError("days must be a positive integer")
    if days < 1 or days > MAX_WINDOW_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_WINDOW_DAYS}")
    return days


def window_bounds(days: int, now: Optional[datetime] = None):
    end = _as_utc(now or datetime.now(timezone.utc))
    return end - timedelta(days=days), end


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive values; everything is stored in UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _window_filters(since: Optional[datetime], until: Optional[datetime], rep_id: Optional[int]):
    filters = []
    if since is not None:
        filters.append(Event.created_at >= since)
    if until is not None:
        filters.append(Event.created_at <= until)
    if rep_id is not None:
        filters.append(Event.rep_id == rep_id)
    return filters


def count_by_type(db: Session, filters) -> Dict[str, int]:
    stmt = select(Event.type, func.count(Event.id)).where(*filters).group_by(Event.type)
    return {t: int(c) for t, c in db.execute(stmt).all()}


def count_by_rep(db: Session, filters) -> List[RepTypeCount]:
    stmt = (
        select(Event.rep_id, Event.type, func.count(Event.id))
        .where(*filters)
        .group_by(Event.rep_id, Event.type)
        .order_by(Event.rep_id.asc(), Event.type.asc())
    )
    return [RepTypeCount(rep_id=int(r), type=t, count=int(c)) for r, t, c in db.execute(stmt).all()]


def daily_taps(db: Session, filters) -> List[DailyPoint]:
    stmt = (
        select(Event.created_at)
        .where(*filters, Event.type == EventType.TAP.value)
        .order_by(Event.created_at.asc())
    )
    by_day = Counter(_as_utc(ts).date().isoformat() for (ts,) in db.execute(stmt).all())
    return [DailyPoint(date=day, count=by_day[day]) for day in sorted(by_day)]


def pivot_by_rep(rows: Iterable[RepTypeCount]) -> Dict[int, Dict[str, int]]:
    """Turn the flat breakdown into rep_id -> type -> count."""
    out: Dict[int, Dict[str, int]] = {}
    for row in rows:
        out.setdefault(row.rep_id, {})[row.type] = row.count
    return out


def aggregate(
    db: Session,
    days: Optional[int] = None,
    rep_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> FunnelReport:
    days = parse_days(days)
    since, until = window_bounds(days, now)
    filters = _window_filters(since, until, rep_id)

    totals = count_by_type(db, filters)
    taps = totals.get(EventType.TAP.value, 0)
    views = totals.get(EventType.VIEW.value, 0)
    submits = totals.get(EventType.SUBMIT.value, 0)

    return FunnelReport(
        summary=FunnelSummary(taps=taps, views=views, submits=submits, conversion_rate=conversion_rate(taps, submits)),
        by_rep=count_by_rep(db, filters),
        daily_chart=daily_taps(db, filters),
    )


def rep_totals(db: Session) -> Dict[int, Dict[str, int]]:
    """All-time per-rep counts by event type."""
    return pivot_by_rep(count_by_rep(db, []))
