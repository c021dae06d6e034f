"""
Template rendering utilities
"""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from hypercontacts.flash import pop_flashes
from hypercontacts.schemas.contact import (
    EMAIL_ADDRESS,
    FIRST_NAME,
    LAST_NAME,
    PHONE,
    SELECTED_IDS_FIELD,
)
from hypercontacts.triggers import Trigger

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_page(
    request: Request,
    template_name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> Response:
    """Render a full page; consumes pending flash messages."""
    page_context = {"flashes": pop_flashes(request), **(context or {})}
    return templates.TemplateResponse(
        request, template_name, page_context, status_code=status_code
    )


def render_fragment(
    request: Request,
    template_name: str,
    context: Optional[Dict[str, Any]] = None,
) -> Response:
    """Render a partial without touching flash messages."""
    return templates.TemplateResponse(request, template_name, context or {})


# Field names and trigger ids are shared with the route code so form inputs,
# error keys, and element ids cannot drift apart.
templates.env.globals.update(
    FIRST_NAME=FIRST_NAME,
    LAST_NAME=LAST_NAME,
    PHONE=PHONE,
    EMAIL_ADDRESS=EMAIL_ADDRESS,
    SEARCH_TRIGGER=Trigger.SEARCH.value,
    DELETE_TRIGGER=Trigger.DELETE_BUTTON.value,
    LOAD_MORE_TRIGGER=Trigger.LOAD_MORE.value,
    SELECTED_IDS_FIELD=SELECTED_IDS_FIELD,
)
