"""
StockLedger FastAPI application.

- Every failure leaves as the ``{success, message, error}`` envelope
- The EventBus gets the audit LoggingHandler when the app starts
- Routers build their service per request from the injected Session
"""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from stockledger.config import settings
from stockledger.core.exceptions import StockLedgerException, to_http_exception
from stockledger.database import create_tables, engine
from stockledger.routers import inventory, inventory_checks, stock_in, stock_out, warehouses
from stockledger.utils.events import configure_event_bus
from stockledger.utils.logging import bind_request_id, configure_logging, reset_request_id

configure_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "startup app=%s version=%s environment=%s stock_out_policy=%s",
        settings.APP_NAME,
        settings.APP_VERSION,
        settings.ENVIRONMENT,
        settings.STOCK_OUT_INSUFFICIENT_POLICY,
    )
    create_tables()
    configure_event_bus()
    yield
    logger.info("shutdown app=%s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Warehouse inventory ledger and stock-movement reconciliation API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind a request id for log correlation and echo it back to the caller."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    token = bind_request_id(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    elapsed_ms = (time.perf_counter() - started) * 1000

    if settings.ENABLE_REQUEST_ID:
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.1f}"
    if settings.ENABLE_SECURITY_HEADERS:
        response.headers.update(SECURITY_HEADERS)
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={settings.STRICT_TRANSPORT_SECURITY_SECONDS}; includeSubDomains"
            )
    if settings.ENABLE_REQUEST_LOGGING:
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={"request_id": request_id},
        )
    return response


# ── Error envelope ───────────────────────────────────────────────────────────

def _envelope(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
    )


@app.exception_handler(StockLedgerException)
async def domain_error_handler(request: Request, exc: StockLedgerException) -> JSONResponse:
    detail = to_http_exception(exc).detail
    if exc.status_code >= 500:
        logger.error("domain_error path=%s code=%s message=%s", request.url.path, detail["code"], exc.message)
    return _envelope(exc.status_code, detail["message"], detail["code"])


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return _envelope(400, "; ".join(problems) or "Invalid request", "VALIDATION_ERROR")


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return _envelope(400, str(exc), "VALIDATION_ERROR")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail), "HTTP_ERROR")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error path=%s", request.url.path)
    error = f"INTERNAL_ERROR: {exc}" if settings.EXPOSE_ERROR_DETAILS else "INTERNAL_ERROR"
    return _envelope(500, "Unexpected server error", error)


for module in (inventory, stock_in, stock_out, inventory_checks, warehouses):
    app.include_router(module.router, prefix=API_PREFIX)


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/", tags=["Health"])
def root():
    return {"app": settings.APP_NAME, "version": settings.APP_VERSION, "status": "running"}


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "healthy", "app": settings.APP_NAME}


@app.get("/ready", tags=["Health"])
def readiness_check(request: Request):
    """Readiness probe; 503 while the database cannot answer a trivial query."""
    database = {"enabled": settings.READINESS_CHECK_DATABASE, "ok": True, "error": None}
    if settings.READINESS_CHECK_DATABASE:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.warning("readiness_database_failed error=%s", exc)
            database["ok"] = False
            database["error"] = str(exc) if settings.EXPOSE_ERROR_DETAILS else "database unavailable"

    return JSONResponse(
        status_code=200 if database["ok"] else 503,
        content={
            "status": "ready" if database["ok"] else "not_ready",
            "version": settings.APP_VERSION,
            "request_id": getattr(request.state, "request_id", None),
            "checks": {"database": database},
        },
    )
