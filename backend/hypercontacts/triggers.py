"""
Hypercontacts — Interaction Trigger Header
===========================================

What:  Interprets the `HX-Trigger` request header sent by htmx.
Why:   The same URL answers differently depending on which control fired the
       request: the search box wants table rows only, the delete button on
       the edit page wants a redirect, a row's delete link wants an empty body,
       and the "load more" row wants the next rows without the page around them.
How:   The header value is matched against a closed set of known element ids.
       Unknown or missing values mean "no special interaction" and fall back
       to the default response shape.

The header selects a response shape only; it is never used for authorization.
"""

from enum import Enum
from typing import Optional

from fastapi import Header

HX_TRIGGER_HEADER = "HX-Trigger"


class Trigger(str, Enum):
    """Element ids of the controls that change the response shape."""

    SEARCH = "search"
    DELETE_BUTTON = "delete-btn"
    LOAD_MORE = "load-more"


def parse_trigger(value: Optional[str]) -> Optional[Trigger]:
    """Map a raw header value to a known trigger, or None."""
    if not value:
        return None
    try:
        return Trigger(value)
    except ValueError:
        return None


async def get_trigger(
    hx_trigger: Optional[str] = Header(default=None, alias=HX_TRIGGER_HEADER),
) -> Optional[Trigger]:
    """FastAPI dependency: the validated trigger of the current request."""
    return parse_trigger(hx_trigger)
