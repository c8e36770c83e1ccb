from datetime import datetime
from typing import Optional

from .common import ApiModel


class DealPageUpdate(ApiModel):
    is_live: Optional[bool] = None
    badge: Optional[str] = None
    headline: Optional[str] = None
    subheadline: Optional[str] = None
    body: Optional[str] = None
    cta_text: Optional[str] = None
    cta_url: Optional[str] = None
    company_name: Optional[str] = None
    logo_url: Optional[str] = None


class DealPageOut(DealPageUpdate):
    id: int
    is_live: bool = False
    updated_at: Optional[datetime] = None
