from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from portfolio.core.database import Base
from portfolio.core.security import USER_ROLE


class User(Base):
    """
    Registered site member.

    Passwords are stored as bcrypt hashes and never leave the service layer.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Username and email are both unique; either one can be used to log in
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    # Authorization claim checked by security.is_admin
    role = Column(String(20), nullable=False, default=USER_ROLE, server_default=USER_ROLE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
