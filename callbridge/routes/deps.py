# callbridge/routes/deps.py
import hmac
from typing import Optional

from fastapi import Header, Request

from ..errors import Unauthorized
from ..services.directory import SubaccountDirectory
from ..services.identity import IdentityStore
from ..services.ledger import EventLedger
from ..services.routing import InboundRouter, OutboundRouter


def get_directory(request: Request) -> SubaccountDirectory:
    return request.app.state.directory


def get_identities(request: Request) -> IdentityStore:
    return request.app.state.identities


def get_ledger(request: Request) -> EventLedger:
    return request.app.state.ledger


def get_inbound_router(request: Request) -> InboundRouter:
    return request.app.state.inbound_router


def get_outbound_router(request: Request) -> OutboundRouter:
    return request.app.state.outbound_router


def require_admin(request: Request, x_admin_key: Optional[str] = Header(None)) -> None:
    """Shared-secret gate for /admin. No ADMIN_SECRET configured means no admin access."""
    secret = request.app.state.settings.admin_secret
    if not secret or not x_admin_key:
        raise Unauthorized()
    if not hmac.compare_digest(x_admin_key.encode(), secret.encode()):
        raise Unauthorized()
