# callbridge/services/routing.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..errors import RequestRejected
from ..schemas.webhooks import OutboundCallRequest, VodiaNewCall
from .directory import SubaccountDirectory
from .ghl_api import GhlForwarder
from .identity import IdentityStore
from .ledger import INBOUND_CALL, OUTBOUND_CALL, EventLedger
from .phone import normalize_phone

logger = logging.getLogger(__name__)

INBOUND_FIRST_NAME = "Inbound"
INBOUND_LAST_NAME = "Caller"


@dataclass(frozen=True)
class Delivery:
    """A single pending POST to a subaccount's GHL inbound webhook."""
    url: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class InboundResult:
    location_id: str
    delivery: Delivery


@dataclass(frozen=True)
class OutboundResult:
    location_id: str
    payload: Dict[str, Any]


class InboundRouter:
    """
    Vodia "new call" -> subaccount (by DID) -> GHL inbound webhook.

    Once the DID resolves the call is never rejected: identity capture, the
    call log and the GHL forward are all best-effort, because Vodia cannot do
    anything useful with a relay error.
    """

    def __init__(
        self,
        directory: SubaccountDirectory,
        identities: IdentityStore,
        ledger: EventLedger,
        forwarder: GhlForwarder,
        email_domain: str = "placeholder.com",
    ):
        self.directory = directory
        self.identities = identities
        self.ledger = ledger
        self.forwarder = forwarder
        self.email_domain = email_domain

    def route(self, call: VodiaNewCall, raw: Mapping[str, Any]) -> InboundResult:
        did = normalize_phone(call.to_number)
        if not did:
            raise RequestRejected("destination_missing", "Destination number missing")

        sub = self.directory.find_by_did(did)
        if sub is None:
            logger.info("inbound call to unrouted DID %s", did)
            raise RequestRejected("no_routing_configured", "No routing configured for this DID")

        phone = normalize_phone(call.from_number)
        first_name = call.from_name or INBOUND_FIRST_NAME
        last_name = INBOUND_LAST_NAME
        email = f"{phone}@{self.email_domain}" if phone else f"inbound@{self.email_domain}"

        try:
            self.identities.upsert(
                name=call.from_name or f"{INBOUND_FIRST_NAME} {INBOUND_LAST_NAME}",
                phone=phone,
                contact_id=call.contact_id,
                location_id=sub.location_id,
            )
        except Exception:
            logger.exception("identity capture failed for inbound call %s; forwarding anyway", call.call_id)

        self.ledger.append(
            INBOUND_CALL,
            {**raw, "locationId": sub.location_id},
            phone=phone,
            contact_id=call.contact_id,
            location_id=sub.location_id,
            status="received",
        )

        payload = {
            "phone": phone,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "call_id": call.call_id,
            "direction": "inbound",
            "locationId": sub.location_id,
        }
        return InboundResult(location_id=sub.location_id, delivery=Delivery(sub.ghl_inbound_url, payload))

    async def forward(self, delivery: Delivery) -> None:
        """At most one delivery attempt, no retry; the outcome is only logged."""
        try:
            resp = await self.forwarder.deliver(delivery.url, delivery.payload)
        except Exception as e:
            logger.error("failed to send inbound call to GHL (%s): %s", delivery.url, e)
            return
        if resp.get("ok"):
            logger.info("inbound sent to GHL for %s", delivery.payload.get("locationId"))
        else:
            logger.error("GHL rejected inbound call (%s): %s %s", delivery.url, resp.get("status"), resp.get("body"))


class OutboundRouter:
    """GHL outbound_call request -> subaccount (by locationId) -> Vodia call payload."""

    def __init__(self, directory: SubaccountDirectory, identities: IdentityStore, ledger: EventLedger):
        self.directory = directory
        self.identities = identities
        self.ledger = ledger

    def route(self, req: OutboundCallRequest) -> OutboundResult:
        phone = normalize_phone(req.phone)

        sub = self.directory.find_by_location_id(req.location_id)
        if sub is None:
            raise RequestRejected("no_subaccount_found", "No subaccount found. Ensure locationId is correct.")

        # capturing the callee is part of the contract here, so errors propagate
        self.identities.upsert(
            name=req.name,
            phone=phone,
            contact_id=req.contact_id,
            location_id=sub.location_id,
        )

        self.ledger.append(
            OUTBOUND_CALL,
            {**req.source(), "locationId": sub.location_id},
            phone=phone,
            contact_id=req.contact_id,
            location_id=sub.location_id,
        )

        payload = {
            "from_number": sub.did_number,
            "to_number": phone,
            "contact_name": req.name,
            "contact_id": req.contact_id,
            "locationId": sub.location_id,
        }
        logger.info("outbound payload for Vodia: %s", payload)
        return OutboundResult(location_id=sub.location_id, payload=payload)
