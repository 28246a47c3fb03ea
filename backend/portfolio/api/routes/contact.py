from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel
from portfolio.core import messages
from portfolio.core.database import get_db
from portfolio.api.dependencies import get_current_session, read_payload
from portfolio.services.contact_service import contact_service
from portfolio.services.session_store import SessionData

router = APIRouter(tags=["contact"])


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactResponse(BaseModel):
    success: bool
    message: str


async def contact_payload(request: Request) -> ContactRequest:
    return await read_payload(request, ContactRequest)


@router.post("/contact", response_model=ContactResponse)
def submit_contact(
    payload: ContactRequest = Depends(contact_payload),
    session: Optional[SessionData] = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Send a contact message as the logged-in user"""
    contact_service.submit(
        db,
        session,
        payload.name,
        payload.email,
        payload.subject,
        payload.message,
    )
    return {"success": True, "message": messages.CONTACT_SUCCESS}
