# callbridge/routes/vodia.py
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from pydantic import ValidationError

from ..errors import RequestRejected
from ..schemas.webhooks import VodiaNewCall
from ..services.routing import InboundRouter
from .deps import get_inbound_router

router = APIRouter()


@router.post("/webhooks/vodia/new-call", summary="Vodia new-call webhook")
def vodia_new_call(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    inbound: InboundRouter = Depends(get_inbound_router),
):
    try:
        call = VodiaNewCall.model_validate(payload)
    except ValidationError as e:
        raise RequestRejected("invalid_payload", "Unreadable new-call payload") from e

    result = inbound.route(call, payload)
    # runs after the response is sent; Vodia never waits on GHL
    background_tasks.add_task(inbound.forward, result.delivery)
    return {"success": True, "routedTo": result.location_id}
