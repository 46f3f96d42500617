"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bhojnalay.config import get_settings
from bhojnalay.database import engine, Base
from bhojnalay import models  # noqa: F401 - registers tables on Base.metadata
from bhojnalay.api import plate_entries, rates, special_rates, reports
from bhojnalay.utils.logger import configure_logging

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if engine is None:
        logger.info(f"No database configured, using local storage at {settings.LOCAL_STORE_PATH}")
        yield
        return

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")

    yield

    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(plate_entries.router, prefix="/api/plate-entries", tags=["Plate Entries"])
app.include_router(rates.router, prefix="/api/rates", tags=["Rates"])
app.include_router(special_rates.router, prefix="/api/special-rates", tags=["Special Rates"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "storage": "database" if engine is not None else "local",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "bhojnalay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
