"""
Hypercontacts — Contact SQLAlchemy Model
=========================================

What:  ORM model representing the `contacts` table.
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by ContactService for every query and by create_tables() at startup.

Table Design:
    - Integer primary key generated by the database, immutable once assigned
    - Four NOT NULL text columns; emptiness is rejected before any write
    - Index on lower(email_address): the uniqueness probe runs on every
      keystroke of the edit form and compares case-insensitively, so it
      must not scan the table
    - No unique constraint on email_address; uniqueness is checked by the
      service layer (see DESIGN.md)
"""

from sqlalchemy import Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from hypercontacts.database import Base


class Contact(Base):
    """
    A stored contact.

    Lifecycle:
        Created from a validated form or JSON body, read alone or in pages,
        replaced field-by-field on edit, deleted alone or in bulk.
        No soft-delete, no versioning.
    """

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), nullable=False)
    email_address: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Contact(id={self.id}, first_name='{self.first_name}', "
            f"last_name='{self.last_name}')>"
        )


# Matches the expression ContactService.email_in_use filters on
Index("idx_contacts_email_address_lower", func.lower(Contact.email_address))
