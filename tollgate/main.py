# tollgate/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
Builds the TollSystem (config, registry, ledger, processor) on startup.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from tollgate.routers import events, toll, vehicles, transactions, rates, health
from tollgate.database import create_tables, SessionLocal
from tollgate.config import settings
from tollgate.errors import PersistenceUnavailable
from tollgate.services.toll_system import build_toll_system
from tollgate.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Tollgate API",
    description="RFID / ANPR toll transaction processing.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow plaza dashboard to call the API) ─────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard IP in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth for management endpoints.
    Lane webhook and health check are excluded; lane devices don't send keys.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/events/identity", "/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(events.router,       prefix="/api/v1", tags=["Lane Events"])
app.include_router(toll.router,         prefix="/api/v1", tags=["Toll"])
app.include_router(vehicles.router,     prefix="/api/v1", tags=["Vehicles"])
app.include_router(transactions.router, prefix="/api/v1", tags=["Transactions"])
app.include_router(rates.router,        prefix="/api/v1", tags=["Rates"])
app.include_router(health.router,       prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Tollgate backend starting up...")
    create_tables()
    logger.info("Database tables ready")

    try:
        app.state.toll_system = build_toll_system(settings, session_factory=SessionLocal)
    except PersistenceUnavailable as e:
        # No durable ledger → no tolling
        logger.critical(f"Cannot start: {e}")
        raise

    logger.info(f"Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Tollgate backend shutting down...")
    system = getattr(app.state, "toll_system", None)
    if system is not None:
        system.close()
