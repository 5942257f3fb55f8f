"""Public contact-form submissions."""

from __future__ import annotations

import structlog

from bookmarkd.database import utcnow
from bookmarkd.models.contact import Contact
from bookmarkd.repositories.contacts import ContactRepository
from bookmarkd.schemas.base import validate_input
from bookmarkd.schemas.contact import ContactCreate
from bookmarkd.services.base import Service

logger = structlog.get_logger()


class ContactService(Service):
    def __init__(self, session):
        super().__init__(session)
        self.contacts = ContactRepository(session)

    async def submit(self, name: str, email: str, message: str) -> Contact:
        data = validate_input(ContactCreate, name=name, email=email, message=message)
        contact = await self.contacts.add(
            Contact(name=data.name, email=data.email, message=data.message, created_at=utcnow())
        )
        await self.commit()
        logger.info("contact_submitted", contact_id=contact.id)
        return contact
