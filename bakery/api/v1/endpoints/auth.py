"""Authentication endpoints (API JWT)."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bakery.core.security import create_access_token, get_current_user, verify_password
from bakery.db.session import get_db
from bakery.models.user import User
from bakery.schemas.auth import AuthUserResponse, LoginRequest, TokenResponse
from bakery.services.errors import Unauthorized
from bakery.services.user_service import get_user_by_login

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user: User | None = get_user_by_login(db=db, login=payload.username.strip())
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("[AUTH] Failed login for %s", payload.username)
        raise Unauthorized("Incorrect username or password")
    if not user.is_active:
        raise Unauthorized("Account is disabled")
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return TokenResponse(access_token=create_access_token(data={"sub": str(user.id), "role": user.role}))


@router.get("/me", response_model=AuthUserResponse)
def me(current_user: User = Depends(get_current_user)) -> AuthUserResponse:
    return AuthUserResponse.model_validate(current_user)
