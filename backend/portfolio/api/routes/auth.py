from typing import Optional
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field
from portfolio.core import messages
from portfolio.core.database import get_db
from portfolio.api.dependencies import (
    clear_session_cookie,
    get_current_session,
    get_session_store,
    get_session_token,
    read_payload,
    set_session_cookie,
)
from portfolio.services.auth_service import auth_service
from portfolio.services.session_store import SessionData, SessionStore

router = APIRouter(tags=["auth"])


class RegisterRequest(BaseModel):
    # All optional: empty fields are reported as a business error, not a 422
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(None, alias="confirm-password")

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    # Accepts a username or an email
    username: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool
    message: str
    username: Optional[str] = None


class AuthStatus(BaseModel):
    isLoggedIn: bool
    username: Optional[str] = None


async def register_payload(request: Request) -> RegisterRequest:
    return await read_payload(request, RegisterRequest)


async def login_payload(request: Request) -> LoginRequest:
    return await read_payload(request, LoginRequest)


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
def register(
    response: Response,
    payload: RegisterRequest = Depends(register_payload),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    token: Optional[str] = Depends(get_session_token),
):
    """Create an account and log it in"""
    user, session = auth_service.register(
        db,
        store,
        payload.username,
        payload.email,
        payload.password,
        payload.confirm_password,
        current_token=token,
    )
    set_session_cookie(response, session)
    return {"success": True, "message": messages.REGISTER_SUCCESS, "username": user.username}


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
def login(
    response: Response,
    payload: LoginRequest = Depends(login_payload),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    token: Optional[str] = Depends(get_session_token),
):
    """Log in with username or email"""
    user, session = auth_service.login(
        db, store, payload.username, payload.password, current_token=token
    )
    set_session_cookie(response, session)
    return {"success": True, "message": messages.LOGIN_SUCCESS, "username": user.username}


@router.get("/check_auth", response_model=AuthStatus, response_model_exclude_none=True)
def check_auth(session: Optional[SessionData] = Depends(get_current_session)):
    """Report whether the visitor is logged in"""
    return auth_service.check_auth(session)


@router.get("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    """End the session; succeeds even without one"""
    auth_service.logout(store, token)
    clear_session_cookie(response)
    return {"success": True}
