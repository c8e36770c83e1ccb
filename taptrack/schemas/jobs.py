import uuid
from datetime import datetime
from typing import List, Optional

from .common import ApiModel


class JobCreate(ApiModel):
    job_number: Optional[str] = None
    homeowner_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    completion_date: Optional[str] = None
    shingle_type: Optional[str] = None
    shingle_color: Optional[str] = None
    manufacturer: Optional[str] = None
    warranty_years: Optional[int] = None
    warranty_code: Optional[str] = None
    rep_id: Optional[int] = None
    notes: Optional[str] = None
    drone_video_url: Optional[str] = None
    photo_urls: Optional[List[str]] = None


class JobTagOut(ApiModel):
    id: uuid.UUID
    uid: Optional[str] = None
    label: Optional[str] = None
    type: str


class JobOut(ApiModel):
    id: uuid.UUID
    job_number: Optional[str] = None
    homeowner_name: str
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    completion_date: Optional[datetime] = None
    shingle_type: Optional[str] = None
    shingle_color: Optional[str] = None
    manufacturer: Optional[str] = None
    warranty_years: Optional[int] = None
    warranty_code: Optional[str] = None
    rep_id: Optional[int] = None
    notes: Optional[str] = None
    drone_video_url: Optional[str] = None
    photo_urls: Optional[List[str]] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    tags: List[JobTagOut] = []
