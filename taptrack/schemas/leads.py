import uuid
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .common import ApiModel, empty_to_none
from .reps import RepRef


class LeadCreate(ApiModel):
    rep_id: Optional[int] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('name', 'phone', 'email', 'address', 'city', 'state', 'zip', 'notes', mode='before')
    @classmethod
    def _empty_to_none(cls, v):
        return empty_to_none(v)


class LeadUpdate(ApiModel):
    status: Optional[str] = None
    notes: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class LeadOut(ApiModel):
    id: uuid.UUID
    rep_id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None
    status: str
    source: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    rep: Optional[RepRef] = None
