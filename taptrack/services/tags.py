"""
Tag inventory.

A REP tag must reference a rep, a JOB tag must reference a job, and
TRADESHOW / STATIC tags reference neither. Tags are bookkeeping only:
the chip is programmed with the tap URL and routing never reads this table.
"""
import uuid
from typing import Any, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..models.models import Job, Rep, Tag, TagType
from .errors import Conflict, NotFound, RepNotFound, StorageError, ValidationError
from .tap_resolver import parse_rep_id


logger = structlog.get_logger(__name__)


def parse_tag_type(value: Any) -> TagType:
    if value is None or value == "":
        return TagType.REP
    try:
        return TagType(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Invalid tag type")


def program_url(tag: Tag) -> Optional[str]:
    """URL written to the physical chip."""
    base = settings.public_base_url.rstrip("/")
    if tag.type == TagType.REP.value and tag.rep_id:
        return f"{base}/tap/{tag.rep_id}"
    if tag.type == TagType.JOB.value and tag.job_id:
        return f"{base}/job/{tag.job_id}"
    return None


def create_tag(
    db: Session,
    type: Any = None,
    uid: Optional[str] = None,
    label: Optional[str] = None,
    rep_id: Any = None,
    job_id: Any = None,
    notes: Optional[str] = None,
) -> Tag:
    tag_type = parse_tag_type(type)
    rep_ref = None
    job_ref = None

    if tag_type is TagType.REP:
        if rep_id in (None, ""):
            raise ValidationError("REP tags require repId")
        rep_ref = parse_rep_id(rep_id if not isinstance(rep_id, str) else rep_id.strip())
        if rep_ref is None or db.get(Rep, rep_ref) is None:
            raise RepNotFound()
        if job_id not in (None, ""):
            raise ValidationError("REP tags cannot reference a job")
    elif tag_type is TagType.JOB:
        if job_id in (None, ""):
            raise ValidationError("JOB tags require jobId")
        try:
            job_ref = uuid.UUID(str(job_id))
        except ValueError:
            raise NotFound("Job not found")
        if db.get(Job, job_ref) is None:
            raise NotFound("Job not found")
        if rep_id not in (None, ""):
            raise ValidationError("JOB tags cannot reference a rep")
    elif rep_id not in (None, "") or job_id not in (None, ""):
        raise ValidationError(f"{tag_type.value} tags cannot reference a rep or job")

    tag = Tag(
        uid=(uid or "").strip() or None,
        label=(label or "").strip() or None,
        type=tag_type.value,
        rep_id=rep_ref,
        job_id=job_ref,
        notes=(notes or "").strip() or None,
    )
    try:
        db.add(tag)
        db.commit()
        db.refresh(tag)
    except IntegrityError:
        db.rollback()
        raise Conflict("Tag UID already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("tag_create_failed", error=str(e))
        raise StorageError("Could not save tag")
    logger.info("tag_created", tag_id=str(tag.id), type=tag.type, rep_id=tag.rep_id)
    return tag


def list_tags(db: Session, type: Any = None) -> List[Tag]:
    stmt = select(Tag).options(selectinload(Tag.rep), selectinload(Tag.job))
    if type:
        stmt = stmt.where(Tag.type == parse_tag_type(type).value)
    stmt = stmt.order_by(Tag.created_at.desc())
    return list(db.execute(stmt).scalars().all())
