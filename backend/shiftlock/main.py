import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftlock.api.match import router as match_router
from shiftlock.api.payroll import router as payroll_router
from shiftlock.api.profile import router as profile_router
from shiftlock.api.shifts import router as shifts_router
from shiftlock.db.session import init_db
from shiftlock.holidays import warm_cache_on_startup

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and pre-load public holidays on startup."""
    logger.info("Initialisation de la base locale...")
    await init_db()

    await warm_cache_on_startup()

    yield

    logger.info("Shutting down ShiftLock backend.")


app = FastAPI(
    title="ShiftLock API",
    description="Suivi des heures, quatorzaines, indemnités et rapprochement avec le décompte employeur.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profile_router, prefix="/api/profile", tags=["Profile"])
app.include_router(shifts_router, prefix="/api/shifts", tags=["Shifts"])
app.include_router(payroll_router, prefix="/api/payroll", tags=["Payroll"])
app.include_router(match_router, prefix="/api/match", tags=["Match"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
