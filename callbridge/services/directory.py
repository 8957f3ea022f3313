# callbridge/services/directory.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..errors import RequestRejected
from ..models import Subaccount
from .db import Database
from .phone import did_variants, normalize_phone

logger = logging.getLogger(__name__)


class SubaccountDirectory:
    """
    Registry of tenants (GHL subaccounts).

    Every subaccount is reachable by its GHL locationId (outbound requests) and
    by the DID Vodia dials for it (inbound calls). Both keys are unique; routes
    never create subaccounts, only the admin API does.
    """

    def __init__(self, db: Database):
        self.db = db

    def find_by_location_id(self, location_id: Optional[str]) -> Optional[Subaccount]:
        if not location_id:
            return None
        with self.db.session() as s:
            return s.scalars(
                select(Subaccount).where(Subaccount.location_id == location_id)
            ).first()

    def find_by_did(self, did: Optional[str]) -> Optional[Subaccount]:
        """
        `did` must already be normalized. A 10 digit North American number
        and its 11 digit "1" prefixed form resolve to the same subaccount; an
        exact match wins if both were ever stored.
        """
        variants = did_variants(did)
        if not variants:
            return None
        with self.db.session() as s:
            return _prefer_exact(s.scalars(
                select(Subaccount).where(Subaccount.did_number.in_(variants))
            ).all(), did)

    def upsert(
        self,
        location_id: Optional[str],
        ghl_inbound_url: Optional[str],
        did_number: Optional[str],
        name: Optional[str] = None,
    ) -> Subaccount:
        """
        Create the subaccount for `location_id` or fully replace its fields.

        A DID already owned by another location is rejected rather than moved.
        """
        did = normalize_phone(did_number)
        if not location_id or not ghl_inbound_url or not did:
            raise RequestRejected("missing_fields", "locationId, ghlInboundUrl and didNumber are required")

        try:
            with self.db.session() as s:
                owners = s.scalars(
                    select(Subaccount).where(Subaccount.did_number.in_(did_variants(did)))
                ).all()
                if any(o.location_id != location_id for o in owners):
                    raise RequestRejected(
                        "did_in_use",
                        f"DID {did} is already routed to another subaccount",
                    )

                sub = s.scalars(
                    select(Subaccount).where(Subaccount.location_id == location_id)
                ).first()
                created = sub is None
                if created:
                    sub = Subaccount(location_id=location_id)
                    s.add(sub)
                sub.name = name
                sub.ghl_inbound_url = ghl_inbound_url
                sub.did_number = did
                s.flush()
        except IntegrityError as e:
            # lost a race with a concurrent upsert of the same DID/location
            logger.warning("subaccount upsert conflict for %s: %s", location_id, e.orig)
            raise RequestRejected("subaccount_conflict", "locationId or DID already taken") from e

        logger.info("subaccount %s %s (did=%s)", location_id, "created" if created else "updated", did)
        return sub

    def list_all(self) -> List[Subaccount]:
        with self.db.session() as s:
            return list(s.scalars(select(Subaccount).order_by(Subaccount.id.asc())))


def _prefer_exact(rows: List[Subaccount], did: str) -> Optional[Subaccount]:
    for row in rows:
        if row.did_number == did:
            return row
    return rows[0] if rows else None
