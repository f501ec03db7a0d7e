from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.database import dispose_engine, get_engine
from .core.errors import LedgerError
from .core.log import configure_logging
from .routers import register_routers

configure_logging()
logger = structlog.get_logger(__name__)

_HTTP_KINDS = {401: "UNAUTHORIZED", 403: "BLOCKED", 404: "NOT_FOUND", 405: "INVALID", 422: "INVALID", 429: "RATE_LIMITED"}


def _failure(status_code: int, kind: str, message: str, details: object = None) -> JSONResponse:
    error: dict[str, object] = {"kind": kind, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder({"success": False, "error": error}))


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_engine()
    yield
    dispose_engine()


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return _failure(exc.status_code, exc.kind, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _failure(422, "INVALID", message, details=errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _failure(exc.status_code, _HTTP_KINDS.get(exc.status_code, "ERROR"), str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("store.read_failed", path=request.url.path, error=str(exc))
    return _failure(503, "STORE_FAILURE", "The data store is unavailable")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", path=request.url.path)
    return _failure(500, "INTERNAL", "Internal server error")


@app.get("/health")
def health():
    return {"status": "ok"}


register_routers(app)
