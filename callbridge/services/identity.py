# callbridge/services/identity.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..models import User
from .db import Database

logger = logging.getLogger(__name__)


class IdentityStore:
    """Callers/contacts seen on either leg, one row per (location, phone)."""

    def __init__(self, db: Database):
        self.db = db

    def upsert(
        self,
        name: Optional[str],
        phone: Optional[str],
        contact_id: Optional[str],
        location_id: str,
    ) -> User:
        """
        Last write wins: a repeat event for the same phone overwrites name and
        contactId, it does not merge them. `phone` must already be normalized.
        """
        try:
            return self._write(name, phone, contact_id, location_id)
        except IntegrityError:
            # another request inserted the same (location, phone) first;
            # the row exists now, so overwrite it
            logger.debug("identity insert raced for %s/%s, retrying as update", location_id, phone)
            return self._write(name, phone, contact_id, location_id)

    def _write(self, name, phone, contact_id, location_id) -> User:
        with self.db.session() as s:
            user = None
            if phone:
                user = s.scalars(
                    select(User).where(User.location_id == location_id, User.phone == phone)
                ).first()
            if user is None:
                user = User(location_id=location_id, phone=phone or None)
                s.add(user)
            user.name = name
            user.contact_id = contact_id
            s.flush()
            return user

    def list_all(self, limit: Optional[int] = None) -> List[User]:
        stmt = select(User).order_by(User.id.asc())
        if limit:
            stmt = stmt.limit(limit)
        with self.db.session() as s:
            return list(s.scalars(stmt))
