"""
Hypercontacts — Pydantic Record Shapes
=======================================

What:  The shapes a contact takes on its way in and out of the application.
Why:   Input without an identifier, stored records with one, and unvalidated
       form data are three different things and get three different models.

Shapes:
    PendingContact   Raw form input; every field optional
    NewContact       A valid contact without identifier (insert / replace)
    ContactResponse  A stored contact with its identifier (JSON output)

Form validation:
    PendingContact.to_valid() returns either a NewContact or a dict mapping
    field name → message. One message per field; no partial success.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

# ── Field Names ───────────────────────────────────────────────────────────
# Form input names, JSON keys, and error-map keys all use these.
FIRST_NAME = "first_name"
LAST_NAME = "last_name"
PHONE = "phone"
EMAIL_ADDRESS = "email_address"
CONTACT_FIELDS = (FIRST_NAME, LAST_NAME, PHONE, EMAIL_ADDRESS)

# Checkbox name used by the bulk delete form
SELECTED_IDS_FIELD = "selected_contact_ids"

MISSING_FIELD_MESSAGES = {
    FIRST_NAME: "Missing first name",
    LAST_NAME: "Missing last name",
    PHONE: "Missing phone",
    EMAIL_ADDRESS: "Missing email address",
}

EMAIL_EMPTY_MESSAGE = "Email cannot be empty"
EMAIL_TAKEN_MESSAGE = "Email must be unique"

FieldErrors = Dict[str, str]


class NewContact(BaseModel):
    """
    What:  A complete contact that has not been stored yet.
    Who:   Produced by PendingContact.to_valid(); accepted as the JSON body
           of POST /api/v1/contacts and PUT /api/v1/contacts/{id}.
    """
    first_name: str = Field(min_length=1, description="Given name")
    last_name: str = Field(min_length=1, description="Family name")
    phone: str = Field(min_length=1, description="Phone number, free-form")
    email_address: str = Field(min_length=1, description="Email address")


class ContactResponse(BaseModel):
    """Stored contact as returned by the JSON API."""
    id: int = Field(description="Identifier assigned by the database")
    first_name: str
    last_name: str
    phone: str
    email_address: str

    model_config = {"from_attributes": True}


class ContactListResponse(BaseModel):
    """Wrapper for GET /api/v1/contacts."""
    contacts: List[ContactResponse]


class PendingContact(BaseModel):
    """
    Unvalidated user input from the create/edit forms.

    Empty strings are normalised to None, so "submitted but blank" and
    "not submitted" produce the same error. Values are kept exactly as typed
    otherwise, because a failed submission re-renders them into the form.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email_address: Optional[str] = None

    @field_validator(*CONTACT_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and v == "":
            return None
        return v

    @classmethod
    def from_contact(cls, contact) -> "PendingContact":
        """Pre-fills the edit form from a stored contact."""
        return cls(**{name: getattr(contact, name) for name in CONTACT_FIELDS})

    def to_valid(self) -> Union[NewContact, FieldErrors]:
        """
        Validate all four fields at once.

        Returns:
            NewContact when every field is present and non-empty,
            otherwise a field-error map with one entry per missing field.
        """
        errors: FieldErrors = {}
        for name in CONTACT_FIELDS:
            if getattr(self, name) is None:
                errors[name] = MISSING_FIELD_MESSAGES[name]
        if errors:
            return errors
        return NewContact(**self.model_dump())

    def value(self, name: str) -> str:
        """Form value for re-rendering; missing fields render empty."""
        return getattr(self, name) or ""


# ══════════════════════════════════════════════════════════════════════════
# Operational Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized JSON error body.

    Fields:
        error:      Machine-readable error code (e.g., "not_found")
        message:    Human-readable description
        details:    Optional extra context (only for client-fixable errors)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
