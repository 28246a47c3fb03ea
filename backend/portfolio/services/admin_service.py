import logging
import math
import re
from typing import Any, Dict, Optional
from fastapi import status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session
from portfolio.core import messages
from portfolio.core.config import settings
from portfolio.core.exceptions import AuthorizationError, LoginRequiredError, SystemFailureError
from portfolio.core.security import is_admin
from portfolio.models.message import Message
from portfolio.models.user import User
from portfolio.services.session_store import SessionData

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_page(value: Optional[str]) -> int:
    """
    Lenient page number parsing.

    Uses the leading integer of the string ("3abc" -> 3). Missing,
    non-numeric, zero and negative values all fall back to page 1.
    """
    if value is None:
        return 1
    match = _LEADING_INT.match(str(value))
    if not match:
        return 1
    page = int(match.group(1))
    return page if page >= 1 else 1


def paginate(query: Query, count_query: Query, page: int, per_page: int) -> Dict[str, Any]:
    """
    Build a pagination block for ``query``.

    The count and the page fetch are separate statements, so rows inserted
    in between can make ``total`` and ``data`` disagree slightly.
    """
    total = count_query.count()
    rows = query.limit(per_page).offset((page - 1) * per_page).all()
    return {
        "data": [row._asdict() for row in rows],
        "total": total,
        "current_page": page,
        "per_page": per_page,
        "total_pages": math.ceil(total / per_page),
    }


class AdminService:
    def get_admin_data(
        self,
        db: Session,
        session: Optional[SessionData],
        page_users: Optional[str] = None,
        page_msgs: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Paginated users and messages for the admin dashboard"""
        if session is None:
            raise LoginRequiredError(messages.LOGIN_REQUIRED)

        per_page = settings.ADMIN_PAGE_SIZE
        users_page = parse_page(page_users)
        msgs_page = parse_page(page_msgs)

        try:
            # Role is read from the database, not from the session
            current_user = db.get(User, session.user_id)
            if not is_admin(current_user):
                logger.warning(f"User {session.user_id} ({session.username}) denied admin access")
                raise AuthorizationError(messages.FORBIDDEN)

            users_query = db.query(
                User.id, User.username, User.email, User.created_at
            ).order_by(desc(User.created_at), desc(User.id))

            messages_query = db.query(
                Message.id,
                Message.user_id,
                Message.name,
                Message.email,
                Message.subject,
                Message.message,
                Message.created_at,
                User.username.label("user_name"),
            ).outerjoin(User, Message.user_id == User.id).order_by(
                desc(Message.created_at), desc(Message.id)
            )

            users_block = paginate(users_query, db.query(User), users_page, per_page)
            messages_block = paginate(messages_query, db.query(Message), msgs_page, per_page)
        except SQLAlchemyError:
            logger.exception("Admin data query failed")
            raise SystemFailureError(messages.SYSTEM_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info(
            f"Admin {session.username} fetched users page {users_page}, messages page {msgs_page}"
        )
        return {"users": users_block, "messages": messages_block}


admin_service = AdminService()
