from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import get_current_user
from ..models.models import Tag
from ..schemas.tags import TagCreate, TagOut
from ..services import tags as tag_service


router = APIRouter(prefix="/tags", tags=["tags"])


def _tag_json(tag: Tag) -> dict:
    out = TagOut.model_validate(tag)
    return out.model_copy(update={"program_url": tag_service.program_url(tag)}).to_json()


@router.get("")
def list_tags(type: Optional[str] = None, db: Session = Depends(get_db), _=Depends(get_current_user)):
    return {"tags": [_tag_json(t) for t in tag_service.list_tags(db, type)]}


@router.post("", status_code=201)
def create_tag(payload: TagCreate, db: Session = Depends(get_db), _=Depends(get_current_user)):
    tag = tag_service.create_tag(db, **payload.model_dump())
    return {"tag": _tag_json(tag)}
