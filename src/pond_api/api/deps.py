"""Shared router helpers: engine lookup and the response envelope."""

from typing import Any

from fastapi import Request

from src.pond_common.response import ApiResponse, success_response
from src.pond_engine.engine import PondEngine


def get_engine(request: Request) -> PondEngine:
    """The engine built in the app lifespan."""
    return request.app.state.engine


def ok(request: Request, data: Any = None, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
