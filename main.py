from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hospital_finder.api.booking_routes import router as booking_router
from hospital_finder.api.hospital_routes import router as hospital_router
from hospital_finder.config.settings import get_settings
from hospital_finder.db.models.hospital import Hospital
from hospital_finder.db.session import dispose_engine, get_db_session, init_models
from hospital_finder.middleware.error_handlers import register_exception_handlers
from hospital_finder.utils.logger import configure_logging, get_logger

# Configure logging early
configure_logging()

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info("app.started", env=settings.app_env, version=settings.app_version)
    yield
    await dispose_engine()
    logger.info("app.stopped")


app = FastAPI(
    title=settings.app_name,
    description="""
    Hospital directory and emergency bed booking API.

    ## Features
    - Hospital catalog: list, nearby (geo radius), search, statistics
    - Bulk import of hospitals from a spreadsheet or CSV
    - Emergency bed bookings with bed inventory tracking
    - PDF confirmation forms for confirmed bookings

    ## Booking Flow
    1. **Find a hospital** - GET /hospitals/nearby or /hospitals/search
    2. **Book** - POST /bookings
    3. **Confirm** - POST /bookings/{id}/confirm (takes one available bed)
    4. **Download** - GET /bookings/{id}/download-confirmation
    5. **Cancel** - POST /bookings/{id}/cancel (returns the bed if confirmed)
    """,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(hospital_router, prefix=settings.api_prefix)  # /hospitals - Catalog and import
app.include_router(booking_router, prefix=settings.api_prefix)   # /bookings - Bed bookings


@app.get(f"{settings.api_prefix}/health", tags=["health"])
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """Health check endpoint with database connectivity."""
    try:
        total_hospitals = await session.scalar(select(func.count()).select_from(Hospital))
    except Exception as exc:
        logger.error("health.database_unavailable", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "error": "Health check failed",
                "message": str(exc),
                "database": "disconnected",
            },
        )

    return {
        "status": "ok",
        "message": "Hospital Finder API is running",
        "database": "connected",
        "totalHospitals": total_hospitals or 0,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.api_host, port=settings.api_port)
