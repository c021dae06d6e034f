"""
Hypercontacts — Flash Notifications
====================================

What:  One-shot success/warning messages carried across a redirect.
How:   Messages are appended to the signed session cookie managed by
       Starlette's SessionMiddleware. The next full page render pops them,
       so each message is displayed exactly once.
"""

from typing import Dict, List

from starlette.requests import Request

FLASH_SESSION_KEY = "_flashes"

SUCCESS = "success"
WARNING = "warning"


def flash(request: Request, message: str, level: str = SUCCESS) -> None:
    """Queue a message for the next page load."""
    queued = list(request.session.get(FLASH_SESSION_KEY, []))
    queued.append({"level": level, "message": message})
    request.session[FLASH_SESSION_KEY] = queued


def pop_flashes(request: Request) -> List[Dict[str, str]]:
    """Return and clear every queued message."""
    return request.session.pop(FLASH_SESSION_KEY, [])
