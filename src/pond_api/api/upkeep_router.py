"""Upkeep endpoints for external schedulers, plus engine-wide reads.

GET  /upkeep          first settleable pond, if any
POST /upkeep/perform  settle that pond
GET  /config          current engine config
GET  /assets          every asset a pond has been created for
"""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.pond_api.api.deps import get_engine, ok
from src.pond_api.application.schemas import PerformUpkeepRequest
from src.pond_common.response import ApiResponse, page
from src.pond_custody.domain.transfer import token_symbol_or_default
from src.pond_engine.engine import PondEngine

router = APIRouter(tags=["upkeep"])

EngineDep = Annotated[PondEngine, Depends(get_engine)]


@router.get("/upkeep")
async def check_upkeep(request: Request, engine: EngineDep) -> ApiResponse:
    return ok(request, asdict(engine.check_upkeep()))


@router.post("/upkeep/perform")
async def perform_upkeep(
    body: PerformUpkeepRequest, request: Request, engine: EngineDep
) -> ApiResponse:
    result = await engine.perform_upkeep(body.pond_id)
    return ok(request, asdict(result))


@router.get("/config")
async def get_config(request: Request, engine: EngineDep) -> ApiResponse:
    return ok(request, engine.get_config().to_dict())


@router.get("/assets")
async def list_assets(request: Request, engine: EngineDep) -> ApiResponse:
    items = [
        {"asset_address": asset, "symbol": await token_symbol_or_default(engine.custody, asset)}
        for asset in engine.get_supported_assets()
    ]
    return ok(request, page(items))
