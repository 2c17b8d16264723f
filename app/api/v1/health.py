from __future__ import annotations

import os
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings


router = APIRouter()

_START_TIME = time.time()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _version() -> str:
    return (os.getenv("TVCATALOG_VERSION") or os.getenv("APP_VERSION") or "").strip() or "dev"


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "version": _version(),
        "environment": settings.ENV,
        "uptime_seconds": int(max(0.0, time.time() - _START_TIME)),
        "timestamp": _utc_now_iso(),
    }


@router.get("/health/db")
async def health_db_check(db: AsyncSession = Depends(deps.get_db)):
    dialect = make_url(settings.DATABASE_URL).get_backend_name()
    try:
        t0 = time.perf_counter()
        await db.execute(text("SELECT 1"))
        latency_ms = int(round((time.perf_counter() - t0) * 1000.0))
    except Exception as exc:
        return JSONResponse(
            status_code=503,
            content={
                "status": "error",
                "db": {"dialect": dialect, "reachable": False, "latency_ms": None},
                "details": str(exc),
                "timestamp": _utc_now_iso(),
            },
        )

    return {
        "status": "ok",
        "db": {"dialect": dialect, "reachable": True, "latency_ms": latency_ms},
        "timestamp": _utc_now_iso(),
    }
