"""Contact submission persistence."""

from __future__ import annotations

from bookmarkd.models.contact import Contact
from bookmarkd.repositories.base import Repository


class ContactRepository(Repository[Contact]):
    model = Contact
