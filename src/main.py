"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.pond_api.api.admin_router import router as admin_router
from src.pond_api.api.ponds_router import router as ponds_router
from src.pond_api.api.upkeep_router import router as upkeep_router
from src.pond_common.database import dispose_db_engine
from src.pond_common.errors import AppError
from src.pond_common.response import error_response
from src.pond_engine.bootstrap import build_engine
from src.pond_gateway.middleware.request_log import RequestLogMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the engine. Shutdown: dispose the journal database, if any."""
    app.state.engine = build_engine(settings)
    yield
    await dispose_db_engine()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s failed: [%d] %s", request.url.path, exc.code, exc.message)
    resp = error_response(exc)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(mode="json"),
    )


app.include_router(ponds_router, prefix="/api/v1")
app.include_router(upkeep_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
