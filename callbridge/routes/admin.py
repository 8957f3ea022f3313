# callbridge/routes/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from ..errors import RequestRejected
from ..report import snapshot
from ..schemas.admin import SubaccountIn
from ..services.directory import SubaccountDirectory
from ..services.identity import IdentityStore
from ..services.ledger import EventLedger
from .deps import get_directory, get_identities, get_ledger, require_admin

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/admin/subaccount", summary="Create or replace a subaccount")
async def upsert_subaccount(request: Request, directory: SubaccountDirectory = Depends(get_directory)):
    # body is read only after the admin gate has passed
    try:
        body = SubaccountIn.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        raise RequestRejected("missing_fields", "locationId, ghlInboundUrl and didNumber are required") from e

    await run_in_threadpool(
        directory.upsert,
        location_id=body.location_id,
        ghl_inbound_url=body.ghl_inbound_url,
        did_number=body.did_number,
        name=body.name,
    )
    return {"success": True}


@router.get("/admin/subaccounts", summary="List subaccounts")
def list_subaccounts(directory: SubaccountDirectory = Depends(get_directory)):
    return [s.to_dict() for s in directory.list_all()]


@router.get("/admin/report", summary="Read-only dump of subaccounts, users and call logs")
def report(
    limit: Optional[int] = Query(100, ge=1, le=1000),
    directory: SubaccountDirectory = Depends(get_directory),
    identities: IdentityStore = Depends(get_identities),
    ledger: EventLedger = Depends(get_ledger),
):
    return snapshot(directory, identities, ledger, limit=limit)
