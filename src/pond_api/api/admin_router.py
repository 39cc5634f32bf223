"""Admin endpoints. Every route requires a Bearer token with the ADMIN role.

POST  /admin/ponds/{pond_id}/clear    clear a range of deferred participant records
POST  /admin/ponds/{pond_id}/refunds  pro-rata refund batch
POST  /admin/ponds/{pond_id}/reset    reset without payout
POST  /admin/withdraw                 move value out of engine custody
POST  /admin/custody/fund             seed the in-memory custody book
PATCH /admin/config                   change engine config
"""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.pond_api.api.deps import get_engine, ok
from src.pond_api.application.schemas import (
    BatchRangeRequest,
    FundRequest,
    UpdateConfigRequest,
    WithdrawRequest,
)
from src.pond_common.enums import Role
from src.pond_common.errors import AppError
from src.pond_common.response import ApiResponse
from src.pond_custody.infrastructure.memory_custody import InMemoryCustody
from src.pond_engine.engine import PondEngine
from src.pond_gateway.auth.dependencies import get_current_caller
from src.pond_gateway.auth.roles import Caller, require_role

router = APIRouter(prefix="/admin", tags=["admin"])

EngineDep = Annotated[PondEngine, Depends(get_engine)]
AdminDep = Annotated[Caller, Depends(get_current_caller)]


@router.post("/ponds/{pond_id}/clear")
async def batch_clear(
    pond_id: str, body: BatchRangeRequest, request: Request, engine: EngineDep, caller: AdminDep
) -> ApiResponse:
    result = await engine.batch_clear(caller, pond_id, body.start, body.end)
    return ok(request, asdict(result))


@router.post("/ponds/{pond_id}/refunds")
async def refund_batch(
    pond_id: str, body: BatchRangeRequest, request: Request, engine: EngineDep, caller: AdminDep
) -> ApiResponse:
    result = await engine.refund_batch(caller, pond_id, body.start, body.end)
    return ok(request, asdict(result))


@router.post("/ponds/{pond_id}/reset")
async def emergency_reset(
    pond_id: str, request: Request, engine: EngineDep, caller: AdminDep
) -> ApiResponse:
    outcome = await engine.emergency_reset(caller, pond_id)
    return ok(request, asdict(outcome), message="Pond reset")


@router.post("/withdraw")
async def emergency_withdraw(
    body: WithdrawRequest, request: Request, engine: EngineDep, caller: AdminDep
) -> ApiResponse:
    await engine.emergency_withdraw(caller, body.asset_address, body.to, body.amount)
    return ok(request, body.model_dump(), message="Withdrawn")


@router.post("/custody/fund")
async def fund_account(
    body: FundRequest, request: Request, engine: EngineDep, caller: AdminDep
) -> ApiResponse:
    require_role(caller, Role.ADMIN)
    custody = engine.custody
    if not isinstance(custody, InMemoryCustody):
        raise AppError(9003, "Custody funding is only available for the in-memory book", 400)
    custody.fund(body.asset_address, body.address, body.amount)
    balance = await custody.balance_of(body.asset_address, body.address)
    return ok(request, {"address": body.address, "asset_address": body.asset_address, "balance": balance})


@router.patch("/config")
async def update_config(
    body: UpdateConfigRequest, request: Request, engine: EngineDep, caller: AdminDep
) -> ApiResponse:
    updated = await engine.update_config(caller, **body.changes())
    return ok(request, updated.to_dict(), message="Config updated")
