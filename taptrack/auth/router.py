from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import User
from ..schemas.auth import LoginRequest, TokenResponse, MeResponse
from ..logging import structlog
from .security import authenticate, create_access_token, get_current_user


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, req.email, req.password)
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    structlog.get_logger().info("admin_login", user_id=str(user.id))
    return TokenResponse(access_token=create_access_token(str(user.id), user.role))


@router.get("/me", response_model=MeResponse)
def me(user: User = Depends(get_current_user)):
    return user
