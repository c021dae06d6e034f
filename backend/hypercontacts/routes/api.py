"""
Hypercontacts — JSON API Route Handlers
========================================

What:  Conventional REST access to the same contacts, under /api/v1.
Who:   Scripts and non-browser clients.

Route Inventory:
    GET    /api/v1/contacts         → {"contacts": [...]}
    POST   /api/v1/contacts         → 201 with the created record
    GET    /api/v1/contacts/{id}    → record, 404 if absent
    PUT    /api/v1/contacts/{id}    → replaced record, 404 if absent
    DELETE /api/v1/contacts/{id}    → 200 "Successfully deleted"

Request bodies are NewContact models: a missing or empty field is rejected
by FastAPI with 422 before any handler runs. Reusing another contact's email
address is a 400 ValidationError.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from hypercontacts.database import get_db_session
from hypercontacts.exceptions import NotFoundError, ValidationError
from hypercontacts.schemas.contact import (
    EMAIL_ADDRESS,
    EMAIL_TAKEN_MESSAGE,
    ContactListResponse,
    ContactResponse,
    ErrorResponse,
    NewContact,
)
from hypercontacts.services.contact_service import contact_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Contacts (JSON)"])


async def _ensure_email_available(db: AsyncSession, new_contact: NewContact, exclude_id=None) -> None:
    if await contact_service.email_in_use(db, new_contact.email_address, exclude_id=exclude_id):
        raise ValidationError(message=EMAIL_TAKEN_MESSAGE, field=EMAIL_ADDRESS)


@router.get(
    "/contacts",
    response_model=ContactListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all contacts",
)
async def list_contacts(db: AsyncSession = Depends(get_db_session)) -> ContactListResponse:
    contacts = await contact_service.all_contacts(db)
    return ContactListResponse(
        contacts=[ContactResponse.model_validate(c) for c in contacts]
    )


@router.post(
    "/contacts",
    status_code=201,
    response_model=ContactResponse,
    responses={
        201: {"description": "Contact created", "model": ContactResponse},
        400: {"description": "Email address already in use", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a contact",
)
async def create_contact(
    new_contact: NewContact,
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    await _ensure_email_available(db, new_contact)
    contact = await contact_service.create_contact(db, new_contact)
    return ContactResponse.model_validate(contact)


@router.get(
    "/contacts/{contact_id}",
    response_model=ContactResponse,
    responses={
        404: {"description": "Contact not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single contact by ID",
)
async def get_contact(
    contact_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    contact = await contact_service.get_contact(db, contact_id)
    if contact is None:
        raise NotFoundError(resource="contact", resource_id=str(contact_id))
    return ContactResponse.model_validate(contact)


@router.put(
    "/contacts/{contact_id}",
    response_model=ContactResponse,
    responses={
        400: {"description": "Email address already in use", "model": ErrorResponse},
        404: {"description": "Contact not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Replace a contact",
)
async def replace_contact(
    contact_id: int,
    new_contact: NewContact,
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    """A missing id is 404 whatever the body says."""
    if await contact_service.get_contact(db, contact_id) is None:
        raise NotFoundError(resource="contact", resource_id=str(contact_id))
    await _ensure_email_available(db, new_contact, exclude_id=contact_id)
    contact = await contact_service.update_contact(db, contact_id, new_contact)
    if contact is None:
        raise NotFoundError(resource="contact", resource_id=str(contact_id))
    return ContactResponse.model_validate(contact)


@router.delete(
    "/contacts/{contact_id}",
    response_class=PlainTextResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Delete a contact",
)
async def delete_contact(
    contact_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> str:
    """Deleting an id that does not exist is not an error."""
    await contact_service.delete_contact(db, contact_id)
    return "Successfully deleted"
