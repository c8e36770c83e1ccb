from datetime import datetime, timezone
from typing import Any, Dict, List

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..models.models import Job
from .errors import StorageError, ValidationError
from .tap_resolver import parse_rep_id


logger = structlog.get_logger(__name__)

JOB_TEXT_FIELDS = (
    "job_number", "city", "state", "zip", "phone", "email", "shingle_type",
    "shingle_color", "manufacturer", "warranty_code", "notes", "drone_video_url",
)


def _parse_date(value: Any):
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("completionDate must be an ISO date")
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def create_job(db: Session, data: Dict[str, Any]) -> Job:
    homeowner = (data.get("homeowner_name") or "").strip()
    address = (data.get("address") or "").strip()
    if not homeowner or not address:
        raise ValidationError("homeownerName and address required")

    job = Job(homeowner_name=homeowner, address=address)
    for key in JOB_TEXT_FIELDS:
        value = data.get(key)
        if value:
            setattr(job, key, str(value).strip())
    job.completion_date = _parse_date(data.get("completion_date"))
    if data.get("warranty_years") not in (None, ""):
        try:
            job.warranty_years = int(data["warranty_years"])
        except (TypeError, ValueError):
            raise ValidationError("warrantyYears must be a number")
    if data.get("rep_id") not in (None, ""):
        job.rep_id = parse_rep_id(data["rep_id"])
        if job.rep_id is None:
            raise ValidationError("Invalid repId")
    job.photo_urls = list(data.get("photo_urls") or [])

    try:
        db.add(job)
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("job_create_failed", error=str(e))
        raise StorageError("Could not save job")
    logger.info("job_created", job_id=str(job.id))
    return job


def list_jobs(db: Session) -> List[Job]:
    stmt = (
        select(Job)
        .options(selectinload(Job.tags))
        .where(Job.is_active.is_(True))
        .order_by(Job.completion_date.desc().nullslast(), Job.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())
