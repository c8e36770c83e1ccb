from typing import Any, Dict, Optional

from pydantic import StrictInt, StrictStr

from .common import ApiModel


class EventCreate(ApiModel):
    rep_id: StrictInt
    type: StrictStr
    meta: Optional[Dict[str, Any]] = None
