"""Response envelope shared by every pond endpoint.

    {
        "code": 0,            // 0 on success, otherwise the AppError code
        "message": "success",
        "kind": null,         // on errors: INPUT_INVALID, STATE_CONFLICT, TRANSFER_FAILURE, ...
        "data": { ... },      // null on error
        "timestamp": "...",
        "request_id": "..."
    }
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.pond_common.enums import ErrorKind
from src.pond_common.errors import AppError


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    kind: ErrorKind | None = None
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(data=data, message=message)


def error_response(exc: AppError) -> ApiResponse:
    return ApiResponse(code=exc.code, message=exc.message, kind=exc.kind)


def page(items: list[Any]) -> dict[str, Any]:
    """List payload: {"items": [...], "total": n}."""
    return {"items": items, "total": len(items)}
