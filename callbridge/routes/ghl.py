# callbridge/routes/ghl.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from ..errors import RequestRejected
from ..schemas.webhooks import GhlWebhook
from ..services.routing import OutboundRouter
from .deps import get_outbound_router

router = APIRouter()


@router.post("/ghl/webhook", summary="GHL workflow webhook")
def ghl_webhook(
    payload: Dict[str, Any] = Body(...),
    outbound: OutboundRouter = Depends(get_outbound_router),
):
    """
    GHL workflows POST `{customData: {type, ...}}`. Only `outbound_call` is
    understood today; the response carries the payload to place the call on
    Vodia from the subaccount's DID.
    """
    try:
        envelope = GhlWebhook.model_validate(payload)
    except ValidationError as e:
        raise RequestRejected("invalid_payload", "customData must be an object") from e

    result = outbound.route(envelope.event())
    return {
        "success": True,
        "message": "Outbound call processed",
        "locationId": result.location_id,
        "payload": result.payload,
    }
