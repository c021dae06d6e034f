"""
Hypercontacts — Application Package Initializer
================================================

What: Marks the `hypercontacts` directory as a Python package.
Why:  Enables module imports like `from hypercontacts.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The application follows a layered architecture:

    ┌─────────────────────────────────────┐
    │   Routes (HTML pages + JSON API)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (ContactService)         │  ← Queries, validation outcomes
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes pick the response shape (full page, row fragment, redirect with a
    flash message, or JSON); services never know which surface called them.
"""

__version__ = "1.0.0"
