import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.routers import hospitals, discovery, bookings, emergencies, changes
from app.database import dispose_engine
from app.services.background import runner

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bed Finder API",
    version="0.1.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Authorization", "Content-Type", "X-User-Id", "X-User-Role"],
)

app.include_router(hospitals.router, prefix="/hospitals", tags=["hospitals"])
app.include_router(discovery.router, prefix="/discovery", tags=["discovery"])
app.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
app.include_router(emergencies.router, prefix="/emergencies", tags=["emergencies"])
app.include_router(changes.router, prefix="/changes", tags=["changes"])


@app.on_event("startup")
async def _log_discovery_config():
    logger.info(
        f"[Discovery] Overpass: {settings.OVERPASS_URL} (timeout {settings.OVERPASS_TIMEOUT_S}s) | "
        f"dedup lat tolerance: ±{settings.DEDUP_LAT_TOLERANCE}°"
    )


@app.on_event("shutdown")
async def _drain_background_sync():
    if runner.pending:
        logger.info(f"[Background] waiting for {runner.pending} sync task(s)")
    await runner.drain()
    await dispose_engine()


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
