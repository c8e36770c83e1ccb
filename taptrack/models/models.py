import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Boolean,
    ForeignKey,
    Integer,
    JSON,
    Text,
    Index,
    Uuid,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class EventType(str, enum.Enum):
    TAP = "TAP"
    VIEW = "VIEW"
    SUBMIT = "SUBMIT"
    CONTACT_SAVE = "CONTACT_SAVE"


class LeadStatus(str, enum.Enum):
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    INSPECTION_BOOKED = "INSPECTION_BOOKED"
    ESTIMATE_SENT = "ESTIMATE_SENT"
    WON = "WON"
    LOST = "LOST"


class TagType(str, enum.Enum):
    REP = "REP"
    JOB = "JOB"
    TRADESHOW = "TRADESHOW"
    STATIC = "STATIC"


class User(Base):
    """Admin account; only used to authenticate the back-office routes."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = uuid_pk()
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(50), default="ADMIN")  # ADMIN|SUPER_ADMIN
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class Rep(Base):
    __tablename__ = "reps"

    # Assigned by the operator; it is printed on the physical tag
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    title: Mapped[Optional[str]] = mapped_column(String(255))
    company: Mapped[Optional[str]] = mapped_column(String(255))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1024))
    cal_link: Mapped[Optional[str]] = mapped_column(String(1024))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    redirect_url: Mapped[Optional[str]] = mapped_column(String(2048))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    leads = relationship("Lead", back_populates="rep", order_by="Lead.created_at.desc()")
    tags = relationship("Tag", back_populates="rep")


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = uuid_pk()
    job_number: Mapped[Optional[str]] = mapped_column(String(100), unique=True)
    homeowner_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(255))
    state: Mapped[Optional[str]] = mapped_column(String(100))
    zip: Mapped[Optional[str]] = mapped_column(String(20))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    completion_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    shingle_type: Mapped[Optional[str]] = mapped_column(String(255))
    shingle_color: Mapped[Optional[str]] = mapped_column(String(255))
    manufacturer: Mapped[Optional[str]] = mapped_column(String(255))
    warranty_years: Mapped[Optional[int]] = mapped_column(Integer)
    warranty_code: Mapped[Optional[str]] = mapped_column(String(255))
    rep_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("reps.id"))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    drone_video_url: Mapped[Optional[str]] = mapped_column(String(1024))
    photo_urls: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    tags = relationship("Tag", back_populates="job")


class Tag(Base):
    """Inventory record for a physical chip. Routing never looks tags up."""

    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = uuid_pk()
    uid: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    label: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(20), default=TagType.REP.value, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    rep_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("reps.id"))
    job_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), ForeignKey("jobs.id"))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    rep = relationship("Rep", back_populates="tags")
    job = relationship("Job", back_populates="tags")


class Event(Base):
    """Append-only tap/view/submit fact. Never updated or deleted."""

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = uuid_pk()
    # No FK: a write for an unknown rep is kept rather than rejected
    rep_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    meta: Mapped[Optional[dict]] = mapped_column(JSON)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)
    ip: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_events_rep_created", "rep_id", "created_at"),
        Index("ix_events_type_created", "type", "created_at"),
    )


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[uuid.UUID] = uuid_pk()
    rep_id: Mapped[int] = mapped_column(Integer, ForeignKey("reps.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    address: Mapped[Optional[str]] = mapped_column(String(500))
    city: Mapped[Optional[str]] = mapped_column(String(255))
    state: Mapped[Optional[str]] = mapped_column(String(100))
    zip: Mapped[Optional[str]] = mapped_column(String(20))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(32), default=LeadStatus.NEW.value, nullable=False, index=True)
    source: Mapped[str] = mapped_column(String(50), default="nfc", nullable=False)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)
    ip: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    rep = relationship("Rep", back_populates="leads")


class DealPage(Base):
    """Singleton (id=1) marketing copy for the public deals page."""

    __tablename__ = "deal_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False, default=1)
    is_live: Mapped[bool] = mapped_column(Boolean, default=False)
    badge: Mapped[Optional[str]] = mapped_column(String(255))
    headline: Mapped[Optional[str]] = mapped_column(String(500))
    subheadline: Mapped[Optional[str]] = mapped_column(String(500))
    body: Mapped[Optional[str]] = mapped_column(Text)
    cta_text: Mapped[Optional[str]] = mapped_column(String(255))
    cta_url: Mapped[Optional[str]] = mapped_column(String(1024))
    company_name: Mapped[Optional[str]] = mapped_column(String(255))
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
