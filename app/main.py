# app/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers, all routers, and the
startup wiring of storage, broadcaster and access verifier.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import access, alerts, dashboard, students, vehicles, health, realtime
from app.config import settings
from app.exceptions import GateAccessError, PersistenceUnavailable
from app.services.access_verifier import AccessVerifier
from app.services.broadcaster import Broadcaster
from app.storage import create_storage
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

API_PREFIX = "/api"

app = FastAPI(
    title="Campus Gate Access API",
    description="Student vehicle verification, access logging and live alerts for campus gates.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (dashboard and camera stations run in the browser) ─────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth for REST endpoints.
    Health check and docs stay open. WebSocket upgrades do not pass through here;
    /ws checks the same key itself.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    open_paths = {f"{API_PREFIX}/health", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.open_paths or request.method == "OPTIONS" or not settings.API_KEY:
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


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(PersistenceUnavailable)
async def persistence_exception_handler(request: Request, exc: PersistenceUnavailable):
    logger.error(f"Store unavailable on {request.url.path}: {exc.message}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": exc.message},
    )


@app.exception_handler(GateAccessError)
async def gate_access_exception_handler(request: Request, exc: GateAccessError):
    logger.info(f"{request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(access.router,    prefix=API_PREFIX, tags=["🚗 Access"])
app.include_router(alerts.router,    prefix=API_PREFIX, tags=["🔔 Alerts"])
app.include_router(dashboard.router, prefix=API_PREFIX, tags=["📊 Dashboard"])
app.include_router(students.router,  prefix=API_PREFIX, tags=["🎓 Students"])
app.include_router(vehicles.router,  prefix=API_PREFIX, tags=["🔍 Vehicles"])
app.include_router(health.router,    prefix=API_PREFIX, tags=["💚 Health"])
app.include_router(realtime.router,  tags=["📡 Real-time"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Gate Access Backend starting up...")
    app.state.storage = create_storage(settings)
    app.state.broadcaster = Broadcaster(send_timeout=settings.BROADCAST_SEND_TIMEOUT_SECONDS)
    app.state.verifier = AccessVerifier(
        app.state.storage,
        app.state.broadcaster,
        timeout=settings.PERSISTENCE_TIMEOUT_SECONDS,
    )
    logger.info(f"✅ Storage ready ({settings.storage_backend})")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs, live events at /ws")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Gate Access Backend shutting down...")
    await app.state.broadcaster.close_all()
