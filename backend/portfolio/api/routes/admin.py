from typing import Generic, List, Optional, TypeVar
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, field_serializer
from datetime import datetime
from portfolio.core.database import get_db
from portfolio.api.dependencies import get_current_session
from portfolio.services.admin_service import admin_service
from portfolio.services.session_store import SessionData

router = APIRouter(prefix="/admin", tags=["admin"])

RowT = TypeVar("RowT")


class AdminUser(BaseModel):
    # No password field: hashes never leave the server
    id: int
    username: str
    email: str
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class AdminMessage(BaseModel):
    id: int
    user_id: Optional[int]
    name: str
    email: str
    subject: str
    message: str
    created_at: Optional[datetime]
    user_name: Optional[str]  # None when the submitter no longer exists

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class PageBlock(BaseModel, Generic[RowT]):
    data: List[RowT]
    total: int
    current_page: int
    per_page: int
    total_pages: int


class AdminDataResponse(BaseModel):
    success: bool
    users: PageBlock[AdminUser]
    messages: PageBlock[AdminMessage]


@router.get("/data", response_model=AdminDataResponse)
def get_admin_data(
    page_users: Optional[str] = Query(None, description="Users page, 1-based"),
    page_msgs: Optional[str] = Query(None, description="Messages page, 1-based"),
    session: Optional[SessionData] = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Users and contact messages for the admin dashboard"""
    # Page parameters are strings so that junk values fall back to page 1 instead of a 422
    result = admin_service.get_admin_data(db, session, page_users, page_msgs)
    return {"success": True, **result}
