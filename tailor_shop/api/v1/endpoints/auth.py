"""Authentication endpoints (API JWT)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tailor_shop.core.security import create_access_token, get_session_user
from tailor_shop.db.session import get_db
from tailor_shop.schemas.auth import LoginRequest, SessionUserResponse, TokenResponse
from tailor_shop.services.account_service import authenticate_user
from tailor_shop.services.branch_access import SessionUser

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = authenticate_user(db, payload.email, payload.password)
    if user is None:
        logger.info("[AUTH] Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    logger.info("[AUTH] Login user_id=%s role=%s", user.id, user.role)
    return TokenResponse(access_token=create_access_token(data={"sub": str(user.id)}))


@router.get("/me", response_model=SessionUserResponse)
def me(current_user: SessionUser = Depends(get_session_user)) -> SessionUserResponse:
    return SessionUserResponse(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        role=current_user.role,
        branch_id=current_user.branch_id,
        branch_name=current_user.branch_name,
    )
