# callbridge/services/ledger.py
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import select

from ..models import CallLog
from .db import Database
from .phone import normalize_phone

logger = logging.getLogger(__name__)

INBOUND_CALL = "inbound_call"
OUTBOUND_CALL = "outbound_call"


class EventLedger:
    """
    Append-only audit trail of every routed call event.

    Writes are best-effort: a failing insert is logged and dropped so that the
    audit trail can never fail (or trigger a retry of) a live call request.
    """

    def __init__(self, db: Database):
        self.db = db

    def append(
        self,
        event_type: str,
        payload: Mapping[str, Any],
        phone: Optional[str] = None,
        contact_id: Optional[str] = None,
        location_id: Optional[str] = None,
        status: str = "processed",
    ) -> None:
        """
        The indexed columns come from the caller's already parsed fields;
        `payload` is kept verbatim for forensics, whatever keys it used.
        """
        try:
            with self.db.session() as s:
                s.add(CallLog(
                    type=event_type,
                    phone=normalize_phone(phone) or None,
                    contact_id=contact_id,
                    location_id=location_id,
                    status=status,
                    payload=dict(payload),
                ))
        except Exception:
            logger.exception("failed to log %s call (location=%s)", event_type, location_id)

    def list_recent(self, limit: Optional[int] = None) -> List[CallLog]:
        stmt = select(CallLog).order_by(CallLog.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        with self.db.session() as s:
            return list(s.scalars(stmt))
