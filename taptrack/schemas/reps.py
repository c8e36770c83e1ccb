from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .common import ApiModel, empty_to_none


class RepBase(ApiModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    cal_link: Optional[str] = None
    redirect_url: Optional[str] = None


class RepCreate(RepBase):
    id: Optional[int] = None
    name: Optional[str] = None

    @field_validator('name', 'phone', 'email', 'title', 'company', 'bio', 'photo_url', 'cal_link', 'redirect_url', mode='before')
    @classmethod
    def _empty_to_none(cls, v):
        return empty_to_none(v)


class RepUpdate(ApiModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    cal_link: Optional[str] = None
    is_active: Optional[bool] = None
    redirect_url: Optional[str] = None


class RepOut(RepBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RepRef(ApiModel):
    id: int
    name: str
