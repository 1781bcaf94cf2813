from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Any
from datetime import datetime, timezone
import logging

from circleage.config import settings
from circleage.database import create_db_and_tables
from circleage.api import emergency, medication, navigation, weather

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Lifespan manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await create_db_and_tables()
    logger.info("Application starting up")
    yield
    # Shutdown
    logger.info("Application shutting down")

app = FastAPI(
    title="CircleAge API",
    description="Medication adherence, emergency contacts and Singapore navigation for seniors",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(emergency.router, prefix="/api/emergency", tags=["Emergency"])
app.include_router(medication.router, prefix="/api/medications", tags=["Medications"])
app.include_router(navigation.router, prefix="/api/navigation", tags=["Navigation"])
app.include_router(weather.router, prefix="/api/weather", tags=["Weather"])

@app.get("/")
async def root():
    return {
        "message": "CircleAge API",
        "status": "active",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

# Health check endpoint
@app.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "sms_mode": "live" if settings.sms_configured else "simulated"
    }
