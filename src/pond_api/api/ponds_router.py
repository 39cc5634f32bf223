"""Pond REST endpoints.

GET    /ponds                                  all pond ids with status
GET    /ponds/standard?asset=                  one row per standard period
GET    /ponds/{pond_id}                        status
GET    /ponds/{pond_id}/participants           participant list
GET    /ponds/{pond_id}/participants/{address} cumulative amount
GET    /ponds/{pond_id}/winner                 last winner
GET    /ponds/{pond_id}/debug                  totals consistency check
GET    /ponds/{pond_id}/events                 journal entries
POST   /ponds                                  custom pond (FACTORY)
POST   /ponds/standard                         standard ponds (FACTORY)
DELETE /ponds/{pond_id}                        remove custom pond (POND_MANAGER)
PATCH  /ponds/{pond_id}/limits                 floor/cap (POND_MANAGER)
POST   /ponds/{pond_id}/tosses                 deposit (token required)
POST   /ponds/{pond_id}/top-ups                sponsor top-up (token required)
POST   /ponds/{pond_id}/settle                 settle after timelock
"""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.pond_api.api.deps import get_engine, ok
from src.pond_api.application.schemas import (
    CreatePondRequest,
    CreateStandardPondsRequest,
    DebugOut,
    ParticipantOut,
    PondStatusOut,
    StandardPondOut,
    TopUpRequest,
    TossRequest,
    UpdateLimitsRequest,
    WinnerOut,
)
from src.pond_common.enums import STANDARD_PERIODS, PondEventType, Role
from src.pond_common.response import ApiResponse, page
from src.pond_engine.engine import PondEngine
from src.pond_engine.factory import PondFactory
from src.pond_gateway.auth.dependencies import get_current_caller, get_optional_caller
from src.pond_gateway.auth.roles import Caller, require_role
from src.pond_ledger.domain.models import NATIVE_ASSET

router = APIRouter(prefix="/ponds", tags=["ponds"])

EngineDep = Annotated[PondEngine, Depends(get_engine)]
CallerDep = Annotated[Caller, Depends(get_optional_caller)]
AuthedCallerDep = Annotated[Caller, Depends(get_current_caller)]


def _acting_address(explicit: str | None, caller: Caller) -> str:
    """Funds are pulled from the token subject unless an OPERATOR names another address."""
    if not explicit or explicit.lower() == caller.address.lower():
        return caller.address
    require_role(caller, Role.OPERATOR)
    return explicit


@router.get("")
async def list_ponds(request: Request, engine: EngineDep) -> ApiResponse:
    now = engine.now()
    items = [
        PondStatusOut.from_view(engine.get_pond_status(pid, now)).model_dump()
        for pid in engine.get_all_pond_ids()
    ]
    return ok(request, page(items))


@router.get("/standard")
async def list_standard_ponds(
    request: Request,
    engine: EngineDep,
    asset: str = Query(NATIVE_ASSET, description="Asset address; zero address for native"),
) -> ApiResponse:
    rows = [StandardPondOut.from_view(v).model_dump() for v in engine.get_standard_ponds_for_ui(asset)]
    return ok(request, {"asset": asset, "items": rows})


@router.get("/{pond_id}")
async def get_pond(pond_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    return ok(request, PondStatusOut.from_view(engine.get_pond_status(pond_id)).model_dump())


@router.get("/{pond_id}/participants")
async def list_participants(pond_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    items = [ParticipantOut.from_view(p).model_dump() for p in engine.get_pond_participants(pond_id)]
    return ok(request, page(items))


@router.get("/{pond_id}/participants/{address}")
async def get_participant(
    pond_id: str, address: str, request: Request, engine: EngineDep
) -> ApiResponse:
    amount = engine.get_participant_amount(pond_id, address)
    return ok(request, {"pond_id": pond_id, "address": address, "amount": amount})


@router.get("/{pond_id}/winner")
async def get_winner(pond_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    record = engine.get_last_winner(pond_id)
    return ok(request, None if record is None else WinnerOut.from_record(record).model_dump())


@router.get("/{pond_id}/debug")
async def debug_pond(pond_id: str, request: Request, engine: EngineDep) -> ApiResponse:
    return ok(request, DebugOut.from_report(engine.debug_pond_data(pond_id)).model_dump())


@router.get("/{pond_id}/events")
async def list_pond_events(
    pond_id: str,
    request: Request,
    engine: EngineDep,
    event_type: PondEventType | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
) -> ApiResponse:
    engine.get_pond(pond_id)
    events = await engine.list_events(pond_id, event_type, limit)
    return ok(request, page([e.to_dict() for e in events]))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_custom_pond(
    body: CreatePondRequest, request: Request, engine: EngineDep, caller: CallerDep
) -> ApiResponse:
    pond = await PondFactory(engine).create_custom_pond(
        caller,
        name=body.name,
        start_time=body.start_time,
        end_time=body.end_time,
        asset_address=body.asset_address,
        min_toss=body.min_toss,
        max_total_toss=body.max_total_toss,
    )
    return ok(
        request,
        PondStatusOut.from_view(engine.get_pond_status(pond.id)).model_dump(),
        message="Pond created",
    )


@router.post("/standard", status_code=status.HTTP_201_CREATED)
async def create_standard_ponds(
    body: CreateStandardPondsRequest, request: Request, engine: EngineDep, caller: CallerDep
) -> ApiResponse:
    created = await PondFactory(engine).create_standard_ponds(
        caller,
        asset_address=body.asset_address,
        min_toss=body.min_toss,
        max_total_toss=body.max_total_toss,
        periods=body.periods or STANDARD_PERIODS,
    )
    return ok(request, {"created": [p.id for p in created]})


@router.delete("/{pond_id}")
async def remove_pond(
    pond_id: str, request: Request, engine: EngineDep, caller: CallerDep
) -> ApiResponse:
    await engine.remove_pond(caller, pond_id)
    return ok(request, {"pond_id": pond_id}, message="Pond removed")


@router.patch("/{pond_id}/limits")
async def update_limits(
    pond_id: str,
    body: UpdateLimitsRequest,
    request: Request,
    engine: EngineDep,
    caller: CallerDep,
) -> ApiResponse:
    pond = await engine.update_pond_limits(caller, pond_id, body.min_toss, body.max_total_toss)
    return ok(request, {"pond_id": pond.id, "min_toss": pond.min_toss, "max_total_toss": pond.max_total_toss})


@router.post("/{pond_id}/tosses")
async def toss(
    pond_id: str, body: TossRequest, request: Request, engine: EngineDep, caller: AuthedCallerDep
) -> ApiResponse:
    depositor = _acting_address(body.depositor, caller)
    receipt = await engine.toss(depositor, pond_id, body.amount, body.attached_value)
    return ok(request, asdict(receipt))


@router.post("/{pond_id}/top-ups")
async def top_up(
    pond_id: str, body: TopUpRequest, request: Request, engine: EngineDep, caller: AuthedCallerDep
) -> ApiResponse:
    sponsor = _acting_address(body.sponsor, caller)
    receipt = await engine.top_up(sponsor, pond_id, body.amount, body.attached_value)
    return ok(request, asdict(receipt))


@router.post("/{pond_id}/settle")
async def settle(
    pond_id: str, request: Request, engine: EngineDep, caller: CallerDep
) -> ApiResponse:
    result = await engine.settle(pond_id, caller)
    return ok(request, asdict(result))
