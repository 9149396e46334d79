"""Health check endpoints"""
import time
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from gatepass.database import get_db
from gatepass.config import settings
from gatepass.models.gate_pass import GatePass, GatePassStatus

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time
STARTUP_TIME = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check():
    """
    Basic health check endpoint

    Returns 200 if service is running
    """
    return {
        "status": "healthy",
        "service": "GatePass",
        "version": "0.1.0",
        "timestamp": _now()
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Readiness check - verifies the database is reachable and responsive

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    checks = {
        "database": False,
        "database_latency_ms": None
    }

    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        checks["database"] = True
        checks["database_latency_ms"] = round(latency_ms, 2)
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "checks": checks,
                "message": f"Database check failed: {str(e)}"
            },
        )

    if latency_ms > 1000:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "degraded",
                "checks": checks,
                "message": "Database latency is high"
            },
        )

    return {
        "status": "ready",
        "checks": checks,
        "timestamp": _now()
    }


@router.get("/live")
def liveness_check():
    """
    Liveness check - verifies service is alive

    Used by Kubernetes liveness probe
    """
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": _now()
    }


@router.get("/stats")
def health_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Gate pass counts by status plus basic system info
    """
    rows = db.query(GatePass.status, func.count(GatePass.id)).group_by(GatePass.status).all()
    by_status = {s.value: 0 for s in GatePassStatus}
    for pass_status, count in rows:
        by_status[GatePassStatus(pass_status).value] = count

    return {
        "status": "healthy",
        "gate_passes": {
            "total": sum(by_status.values()),
            "by_status": by_status
        },
        "system": {
            "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
            "environment": settings.HOST
        },
        "timestamp": _now()
    }
