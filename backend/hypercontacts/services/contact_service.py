"""
Hypercontacts — Contact Service (Repository over the contacts table)
=====================================================================

What:  Every query the application runs against the `contacts` table.
Why:   Routes stay thin and both surfaces (HTML and JSON) share one set of
       queries and one error translation.
How:   Stateless methods receiving the request-scoped AsyncSession.
       Commit happens in get_db_session(); methods only flush.

Outcomes:
    - Missing rows come back as None (get/update) or a zero row count
      (delete). Callers decide whether that is a 404 or a redirect.
    - Ids and pages beyond the INTEGER id column are answered the same way
      without a query; the driver would reject them as out of range.
    - Any SQLAlchemyError (including pool timeouts) becomes DatabaseError.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hypercontacts.exceptions import DatabaseError
from hypercontacts.models.contact import Contact
from hypercontacts.schemas.contact import (
    EMAIL_EMPTY_MESSAGE,
    EMAIL_TAKEN_MESSAGE,
    NewContact,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 10

# Largest value of the INTEGER primary key (int4 on PostgreSQL)
MAX_CONTACT_ID = 2**31 - 1


def is_storable_id(contact_id: int) -> bool:
    """Whether `contact_id` can name a row at all."""
    return 1 <= contact_id <= MAX_CONTACT_ID


class ContactService:
    """
    Data access for contacts.

    Responsibilities:
        - list_contacts(): search or one page of the list
        - all_contacts() / count_contacts(): whole-table reads
        - get_contact(), create_contact(), update_contact()
        - delete_contact(), delete_contacts(): single and bulk delete
        - email_in_use() / check_email(): the email uniqueness rule
    """

    async def list_contacts(
        self,
        db: AsyncSession,
        query: Optional[str] = None,
        page: int = 0,
    ) -> List[Contact]:
        """
        Search by name, or return one page of the list.

        With a non-blank query: contacts whose first or last name contains
        the query (case-insensitive), first PAGE_SIZE by id. The page number
        is ignored while searching.

        Without a query:
            SELECT ... ORDER BY id LIMIT 10 OFFSET page * 10
        """
        search = (query or "").strip()
        stmt = select(Contact).order_by(Contact.id)
        if search:
            stmt = stmt.where(
                or_(
                    Contact.first_name.icontains(search, autoescape=True),
                    Contact.last_name.icontains(search, autoescape=True),
                )
            ).limit(PAGE_SIZE)
        else:
            offset = max(page, 0) * PAGE_SIZE
            if offset >= MAX_CONTACT_ID:
                # More rows than ids can exist; nothing to skip to
                return []
            stmt = stmt.limit(PAGE_SIZE).offset(offset)

        try:
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing contacts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve contacts.",
                context={"error_type": type(e).__name__, "page": page},
            )

    async def all_contacts(self, db: AsyncSession) -> List[Contact]:
        """Every contact ordered by id (JSON collection endpoint)."""
        try:
            result = await db.execute(select(Contact).order_by(Contact.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error reading contacts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve contacts.",
                context={"error_type": type(e).__name__},
            )

    async def count_contacts(self, db: AsyncSession) -> int:
        try:
            result = await db.execute(select(func.count(Contact.id)))
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error counting contacts: %s", str(e))
            raise DatabaseError(
                message="Could not count contacts.",
                context={"error_type": type(e).__name__},
            )

    async def get_contact(self, db: AsyncSession, contact_id: int) -> Optional[Contact]:
        """
        Retrieve a single contact by id.

        Returns:
            The Contact, or None when no row has this id.
        """
        if not is_storable_id(contact_id):
            return None
        try:
            result = await db.execute(select(Contact).where(Contact.id == contact_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching contact %s: %s", contact_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the contact.",
                context={"contact_id": contact_id, "error_type": type(e).__name__},
            )

    async def create_contact(self, db: AsyncSession, new_contact: NewContact) -> Contact:
        """
        Insert a validated contact.

        The id is assigned by the database during flush; the returned object
        carries it.
        """
        contact = Contact(**new_contact.model_dump())
        try:
            db.add(contact)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating contact: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the contact.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Contact created: %s", contact.id)
        return contact

    async def update_contact(
        self,
        db: AsyncSession,
        contact_id: int,
        new_contact: NewContact,
    ) -> Optional[Contact]:
        """
        Replace all four fields of an existing contact.

        Returns:
            The updated Contact, or None when the id does not exist.
        """
        contact = await self.get_contact(db, contact_id)
        if contact is None:
            return None

        for name, value in new_contact.model_dump().items():
            setattr(contact, name, value)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating contact %s: %s", contact_id, str(e))
            raise DatabaseError(
                message="Could not update the contact.",
                context={"contact_id": contact_id, "error_type": type(e).__name__},
            )
        logger.info("Contact updated: %s", contact_id)
        return contact

    async def delete_contact(self, db: AsyncSession, contact_id: int) -> int:
        """Delete one contact. Returns the number of rows removed (0 or 1)."""
        return await self.delete_contacts(db, [contact_id])

    async def delete_contacts(self, db: AsyncSession, contact_ids: Iterable[int]) -> int:
        """
        Delete every contact whose id is in `contact_ids`, in one statement.

        Ids that match nothing are ignored; an empty id set is a no-op.
        """
        ids = sorted(i for i in set(contact_ids) if is_storable_id(i))
        if not ids:
            return 0
        try:
            result = await db.execute(delete(Contact).where(Contact.id.in_(ids)))
        except SQLAlchemyError as e:
            logger.error("Database error deleting contacts %s: %s", ids, str(e))
            raise DatabaseError(
                message="Could not delete contacts.",
                context={"contact_ids": ids, "error_type": type(e).__name__},
            )
        deleted = result.rowcount or 0
        logger.info("Deleted %d of %d requested contacts", deleted, len(ids))
        return deleted

    async def email_in_use(
        self,
        db: AsyncSession,
        email_address: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """
        Whether another contact already uses this email (case-insensitive).

        exclude_id: the contact being edited, which may keep its own address.
        """
        stmt = select(func.count(Contact.id)).where(
            func.lower(Contact.email_address) == email_address.lower()
        )
        if exclude_id is not None and is_storable_id(exclude_id):
            stmt = stmt.where(Contact.id != exclude_id)
        try:
            result = await db.execute(stmt)
            return (result.scalar() or 0) > 0
        except SQLAlchemyError as e:
            logger.error("Database error checking email: %s", str(e))
            raise DatabaseError(
                message="Could not check the email address.",
                context={"error_type": type(e).__name__},
            )

    async def check_email(
        self,
        db: AsyncSession,
        email_address: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> str:
        """
        Interactive email probe.

        Returns:
            "" when the address is usable, otherwise the message to show
            under the email input.
        """
        if not email_address:
            return EMAIL_EMPTY_MESSAGE
        if await self.email_in_use(db, email_address, exclude_id=exclude_id):
            return EMAIL_TAKEN_MESSAGE
        return ""


contact_service = ContactService()
