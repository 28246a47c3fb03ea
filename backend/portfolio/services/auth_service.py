import logging
from typing import Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from portfolio.core import messages
from portfolio.core.exceptions import (
    AuthError,
    ConflictError,
    SystemFailureError,
    ValidationError,
)
from portfolio.core.security import get_password_hash, role_for_username, verify_password
from portfolio.models.user import User
from portfolio.services.session_store import SessionData, SessionStore

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and session lifecycle"""

    def register(
        self,
        db: Session,
        store: SessionStore,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
        current_token: Optional[str] = None,
    ) -> Tuple[User, SessionData]:
        """
        Create an account and log it in.

        Raises ValidationError for empty or mismatched fields, ConflictError
        when the username or email is taken.
        """
        if not username or not email or not password or not confirm_password:
            raise ValidationError(messages.FIELDS_REQUIRED)
        if password != confirm_password:
            raise ValidationError(messages.PASSWORD_MISMATCH)

        try:
            hashed_password = get_password_hash(password)
        except ValueError:
            # bcrypt rejects passwords containing NUL bytes
            raise ValidationError(messages.FIELDS_REQUIRED)

        try:
            existing = db.query(User.id).filter(
                or_(User.username == username, User.email == email)
            ).first()
            if existing:
                raise ConflictError(messages.ALREADY_REGISTERED)

            user = User(
                username=username,
                email=email,
                password=hashed_password,
                role=role_for_username(username),
            )
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError:
            # Two concurrent registrations can both pass the check above;
            # the unique constraints reject the second insert
            db.rollback()
            raise ConflictError(messages.ALREADY_REGISTERED)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Registration failed for username '{username}'")
            raise SystemFailureError(messages.REGISTER_FAILED)

        # One session per browser: replace the one the request came with
        self.logout(store, current_token)
        session = store.create(user.id, user.username)
        logger.info(f"Registered user {user.id} ({user.username})")
        return user, session

    def login(
        self,
        db: Session,
        store: SessionStore,
        username: Optional[str],
        password: Optional[str],
        current_token: Optional[str] = None,
    ) -> Tuple[User, SessionData]:
        """
        Authenticate by username or email.

        Unknown identifiers and wrong passwords raise the same AuthError so
        the response does not reveal which accounts exist.
        """
        if not username or not password:
            raise ValidationError(messages.FIELDS_REQUIRED)

        try:
            user = db.query(User).filter(
                or_(User.username == username, User.email == username)
            ).first()
        except SQLAlchemyError:
            logger.exception("Login lookup failed")
            raise SystemFailureError(messages.SYSTEM_ERROR)

        if not user or not self._password_matches(password, user.password):
            logger.warning(f"Failed login attempt for '{username}'")
            raise AuthError(messages.BAD_CREDENTIALS)

        self.logout(store, current_token)
        session = store.create(user.id, user.username)
        logger.info(f"User {user.id} ({user.username}) logged in")
        return user, session

    @staticmethod
    def _password_matches(password: str, hashed_password: str) -> bool:
        try:
            return verify_password(password, hashed_password)
        except ValueError:
            # Unhashable input (NUL bytes) cannot match any stored hash
            return False

    @staticmethod
    def check_auth(session: Optional[SessionData]) -> dict:
        if session is None:
            return {"isLoggedIn": False}
        return {"isLoggedIn": True, "username": session.username}

    @staticmethod
    def logout(store: SessionStore, token: Optional[str]) -> None:
        """Destroy the session; a missing or unknown token is not an error"""
        if token:
            store.delete(token)


auth_service = AuthService()
