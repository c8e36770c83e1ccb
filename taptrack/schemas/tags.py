import uuid
from datetime import datetime
from typing import Optional

from .common import ApiModel
from .reps import RepRef


class TagCreate(ApiModel):
    uid: Optional[str] = None
    label: Optional[str] = None
    type: Optional[str] = None
    rep_id: Optional[int] = None
    job_id: Optional[str] = None
    notes: Optional[str] = None


class JobRef(ApiModel):
    id: uuid.UUID
    homeowner_name: str
    address: str


class TagOut(ApiModel):
    id: uuid.UUID
    uid: Optional[str] = None
    label: Optional[str] = None
    type: str
    is_locked: bool = False
    is_active: bool = True
    rep_id: Optional[int] = None
    job_id: Optional[uuid.UUID] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    rep: Optional[RepRef] = None
    job: Optional[JobRef] = None
    program_url: Optional[str] = None
