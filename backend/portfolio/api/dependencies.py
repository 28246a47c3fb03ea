import logging
from typing import Optional, Type, TypeVar
from fastapi import Depends, Request, Response
from pydantic import BaseModel, ValidationError as PydanticValidationError
from portfolio.core.config import settings
from portfolio.core.security import create_session_cookie, decode_session_cookie
from portfolio.services.session_store import SessionData, SessionStore, session_store

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def get_session_store() -> SessionStore:
    """
    Session store used by the handlers.

    Tests and alternative deployments swap it through app.dependency_overrides.
    """
    return session_store


def get_session_token(request: Request) -> Optional[str]:
    """Session token from the signed cookie; None when absent or invalid"""
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not cookie:
        return None
    return decode_session_cookie(cookie)


def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionData]:
    """
    Current session, or None when the visitor is not logged in.

    Endpoints decide themselves whether a missing session is an error.
    """
    if token is None:
        return None
    return store.get(token)


def set_session_cookie(response: Response, session: SessionData) -> None:
    """Attach the signed session cookie to the response"""
    # Absolute expiry: the cookie lives exactly as long as the session
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_cookie(session.token, session.expires_at),
        max_age=int((session.expires_at - session.created_at).total_seconds()),
        httponly=True,
        secure=False,  # served over plain HTTP in development
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, httponly=True, samesite="lax")


async def read_payload(request: Request, model: Type[PayloadT]) -> PayloadT:
    """
    Parse a request body sent as JSON or as a form.

    Unreadable bodies and wrongly typed fields yield an empty payload; the
    services then report them as missing fields, after their login checks.
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
            data = dict(await request.form())
        else:
            data = {}
        if not isinstance(data, dict):
            data = {}
        return model.model_validate(data)
    except (ValueError, PydanticValidationError):
        # json.JSONDecodeError is a ValueError
        logger.debug(f"Unreadable {model.__name__} body on {request.url.path}")
        return model.model_validate({})
