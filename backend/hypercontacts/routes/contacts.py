"""
Hypercontacts — HTML Route Handlers
====================================

What:  The hypermedia interface: pages, row fragments, plain-text probes.
Why:   The browser (with htmx) is the client; every response is HTML or a
       short text snippet meant to be swapped into the page.
How:   Handlers call ContactService and choose the response shape from the
       HX-Trigger header (see triggers.py).

Route Inventory:
    GET    /                          → 308 to /contacts
    GET    /contacts?q=&page=         → list page, or rows only for search / load more
    GET    /contacts/count            → "(N total Contacts)"
    GET    /contacts/new              → creation form
    POST   /contacts/new              → create, or re-render with errors
    GET    /contacts/{id}             → view page
    GET    /contacts/{id}/edit        → edit form
    POST   /contacts/{id}/edit        → update, or re-render with errors
    DELETE /contacts/{id}             → delete one
    DELETE /contacts                  → bulk delete of selected_contact_ids
    GET    /contacts/{id}/email       → email uniqueness probe

Post/Redirect/Get:
    Successful writes answer 303 See Other with a flash message, so a reload
    never resubmits the form. Failed validation answers 200 with the form,
    the submitted values, and one message per invalid field.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hypercontacts.database import get_db_session
from hypercontacts.flash import WARNING, flash
from hypercontacts.schemas.contact import (
    EMAIL_ADDRESS,
    EMAIL_TAKEN_MESSAGE,
    SELECTED_IDS_FIELD,
    FieldErrors,
    NewContact,
    PendingContact,
)
from hypercontacts.services.contact_service import PAGE_SIZE, contact_service
from hypercontacts.templating import render_fragment, render_page
from hypercontacts.triggers import Trigger, get_trigger

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contacts (HTML)"])

CONTACTS_URL = "/contacts"
NOT_FOUND_MESSAGE = "Could not find contact"


def _redirect(url: str) -> RedirectResponse:
    # 303: the follow-up request is always a GET, also after POST and DELETE
    return RedirectResponse(url=url, status_code=303)


async def pending_contact_form(
    first_name: Optional[str] = Form(default=None),
    last_name: Optional[str] = Form(default=None),
    phone: Optional[str] = Form(default=None),
    email_address: Optional[str] = Form(default=None),
) -> PendingContact:
    """Collects the create/edit form fields without rejecting anything."""
    return PendingContact(
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        email_address=email_address,
    )


async def _validate_submission(
    db: AsyncSession,
    pending: PendingContact,
    exclude_id: Optional[int] = None,
) -> Tuple[Optional[NewContact], FieldErrors]:
    """
    Required-field validation plus the write-time email uniqueness rule.

    Returns (contact, {}) on success and (None, errors) otherwise.
    """
    result = pending.to_valid()
    errors: FieldErrors = dict(result) if isinstance(result, dict) else {}
    if pending.email_address and await contact_service.email_in_use(
        db, pending.email_address, exclude_id=exclude_id
    ):
        errors[EMAIL_ADDRESS] = EMAIL_TAKEN_MESSAGE
    if errors:
        return None, errors
    return result, {}


@router.get("/", include_in_schema=False)
async def root() -> RedirectResponse:
    return RedirectResponse(url=CONTACTS_URL, status_code=308)


@router.get("/contacts", response_class=Response)
async def contacts_index(
    request: Request,
    q: Optional[str] = Query(default=None, description="Search first/last name"),
    page: int = Query(default=0, ge=0, description="Zero-based page number"),
    trigger: Optional[Trigger] = Depends(get_trigger),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    List, search, and paginate.

    The search box sends HX-Trigger: search and gets only the <tr> rows,
    which htmx swaps into the existing <tbody>. The "load more" row sends
    HX-Trigger: load-more and gets the next rows plus its own replacement.
    Everything else gets the full page, including the "load more" row when
    the page is full. Only the full page consumes flash messages.
    """
    contacts = await contact_service.list_contacts(db, query=q, page=page)
    searching = bool((q or "").strip())

    if trigger is Trigger.SEARCH:
        return render_fragment(request, "contacts/_rows.html", {"contacts": contacts})

    context = {
        "contacts": contacts,
        "query": q or "",
        "page": page,
        "has_more": not searching and len(contacts) >= PAGE_SIZE,
    }
    if trigger is Trigger.LOAD_MORE:
        return render_fragment(request, "contacts/_page_rows.html", context)
    return render_page(request, "contacts/index.html", context)


@router.get("/contacts/count", response_class=PlainTextResponse)
async def contacts_count(db: AsyncSession = Depends(get_db_session)) -> str:
    count = await contact_service.count_contacts(db)
    return f"({count} total Contacts)"


@router.get("/contacts/new", response_class=Response)
async def contacts_new_form(request: Request) -> Response:
    return render_page(
        request,
        "contacts/new.html",
        {"contact": PendingContact(), "errors": {}},
    )


@router.post("/contacts/new", response_class=Response)
async def contacts_new_submit(
    request: Request,
    pending: PendingContact = Depends(pending_contact_form),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    new_contact, errors = await _validate_submission(db, pending)
    if new_contact is None:
        logger.info("Rejected new contact: invalid fields %s", sorted(errors))
        return render_page(
            request,
            "contacts/new.html",
            {"contact": pending, "errors": errors},
        )

    await contact_service.create_contact(db, new_contact)
    flash(request, "Created a new contact!")
    return _redirect(CONTACTS_URL)


@router.get("/contacts/{contact_id}", response_class=Response)
async def contacts_view(
    request: Request,
    contact_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    contact = await contact_service.get_contact(db, contact_id)
    if contact is None:
        flash(request, NOT_FOUND_MESSAGE, level=WARNING)
        return _redirect(CONTACTS_URL)
    return render_page(request, "contacts/view.html", {"contact": contact})


@router.get("/contacts/{contact_id}/edit", response_class=Response)
async def contacts_edit_form(
    request: Request,
    contact_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    contact = await contact_service.get_contact(db, contact_id)
    if contact is None:
        flash(request, NOT_FOUND_MESSAGE, level=WARNING)
        return _redirect(CONTACTS_URL)
    return render_page(
        request,
        "contacts/edit.html",
        {
            "contact_id": contact_id,
            "contact": PendingContact.from_contact(contact),
            "errors": {},
        },
    )


@router.post("/contacts/{contact_id}/edit", response_class=Response)
async def contacts_edit_submit(
    request: Request,
    contact_id: int,
    pending: PendingContact = Depends(pending_contact_form),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Update a contact.

    On failure the form is re-rendered with what the user typed, not with
    the stored values, so no input is lost. A contact that no longer exists
    redirects with a warning before any field is checked.
    """
    if await contact_service.get_contact(db, contact_id) is None:
        flash(request, NOT_FOUND_MESSAGE, level=WARNING)
        return _redirect(CONTACTS_URL)

    new_contact, errors = await _validate_submission(db, pending, exclude_id=contact_id)
    if new_contact is None:
        return render_page(
            request,
            "contacts/edit.html",
            {"contact_id": contact_id, "contact": pending, "errors": errors},
        )

    updated = await contact_service.update_contact(db, contact_id, new_contact)
    if updated is None:
        flash(request, NOT_FOUND_MESSAGE, level=WARNING)
        return _redirect(CONTACTS_URL)

    flash(request, "Updated contact!")
    return _redirect(f"{CONTACTS_URL}/{contact_id}")


@router.delete("/contacts/{contact_id}", response_class=Response)
async def contacts_delete(
    request: Request,
    contact_id: int,
    trigger: Optional[Trigger] = Depends(get_trigger),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Delete one contact.

    The edit page's delete button navigates away, so it gets a redirect with
    a flash. A row's delete link swaps its <tr> with the (empty) body.
    """
    await contact_service.delete_contact(db, contact_id)

    if trigger is Trigger.DELETE_BUTTON:
        flash(request, "Deleted contact!")
        return _redirect(CONTACTS_URL)
    return Response(content="", status_code=200)


def _parse_ids(raw_values: List[str]) -> List[int]:
    ids = []
    for raw in raw_values:
        try:
            ids.append(int(raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric contact id in bulk delete: %r", raw)
    return ids


@router.delete("/contacts", response_class=Response)
async def contacts_delete_selected(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Bulk delete.

    The ids arrive as repeated `selected_contact_ids` values, in the form body
    or in the query string (htmx encodes DELETE parameters in the URL).
    """
    form = await request.form()
    raw_ids = list(form.getlist(SELECTED_IDS_FIELD))
    raw_ids += request.query_params.getlist(SELECTED_IDS_FIELD)

    await contact_service.delete_contacts(db, _parse_ids(raw_ids))

    flash(request, "Deleted contacts!")
    return _redirect(CONTACTS_URL)


@router.get("/contacts/{contact_id}/email", response_class=PlainTextResponse)
async def contacts_email_check(
    contact_id: int,
    email_address: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> str:
    """
    Polled while the user types in the edit form's email input.

    Returns an empty body when the address is usable, otherwise the message
    that htmx places into the field's error span.
    """
    return await contact_service.check_email(db, email_address, exclude_id=contact_id)
