import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from portfolio.core import messages
from portfolio.core.exceptions import LoginRequiredError, SystemFailureError, ValidationError
from portfolio.models.message import Message
from portfolio.services.session_store import SessionData

logger = logging.getLogger(__name__)


class ContactService:
    def submit(
        self,
        db: Session,
        session: Optional[SessionData],
        name: Optional[str],
        email: Optional[str],
        subject: Optional[str],
        message: Optional[str],
    ) -> Message:
        """Store a contact message from the logged-in user"""
        if session is None:
            raise LoginRequiredError(messages.CONTACT_LOGIN_REQUIRED)
        if not name or not email or not subject or not message:
            raise ValidationError(messages.FIELDS_REQUIRED)

        db_message = Message(
            user_id=session.user_id,
            name=name,
            email=email,
            subject=subject,
            message=message,
        )
        try:
            db.add(db_message)
            db.commit()
            db.refresh(db_message)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Could not store contact message from user {session.user_id}")
            raise SystemFailureError(messages.CONTACT_FAILED)

        logger.info(f"Stored message {db_message.id} from user {session.user_id}")
        return db_message


contact_service = ContactService()
