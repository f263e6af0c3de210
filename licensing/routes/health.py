# licensing/routes/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import datetime
import logging
import os
import sys

import psutil

from licensing.config import settings
from licensing.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/health",
    tags=["Health Check"]
)

NO_CACHE = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "X-Health-Check": "true"
}


def _storage_status() -> dict:
    exists = os.path.isdir(settings.STORAGE_DIR)
    return {
        "path": settings.STORAGE_DIR,
        "exists": exists,
        "writable": os.access(settings.STORAGE_DIR, os.W_OK) if exists else False,
    }


@router.get("/")
def health_check(db: Session = Depends(get_db)):
    """
    Health check with database connectivity and host resources
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.datetime.now().isoformat(),
        "service": "Municipal Licensing Workflow API",
        "version": "1.0.0",
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = {"status": "connected", "dialect": db.get_bind().dialect.name}
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        health_status["database"] = {"status": "disconnected", "error": str(e)}
        health_status["status"] = "degraded"

    health_status["system"] = {
        "python_version": sys.version,
        "platform": sys.platform,
        "memory_percent": psutil.virtual_memory().percent,
        "disk_percent": psutil.disk_usage("/").percent,
    }
    health_status["storage"] = _storage_status()
    health_status["payment_gateway"] = "mock" if settings.PAYMENT_MOCK_MODE else "live"

    logger.info(f"Health check completed: {health_status['status']}")
    return JSONResponse(content=health_status, headers=NO_CACHE)


@router.get("/ping")
def ping():
    """Minimal liveness response"""
    return JSONResponse(
        content={"status": "pong", "timestamp": datetime.datetime.now().isoformat()},
        headers={"Cache-Control": "no-cache", "X-Ping": "true"}
    )
