"""
System Endpoints
Cheap liveness check for load balancers and the field app
"""
import logging
import os
import time

import psutil
from fastapi import APIRouter

from pinpoint import __version__
from pinpoint.config import settings
from pinpoint.utils.response_models import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter()

_START_TIME = time.time()
_LAST_HEALTH_LOG_TS: float = 0.0


@router.get("/health", response_model=HealthResponse)
async def check_system_health() -> HealthResponse:
    global _LAST_HEALTH_LOG_TS
    try:
        memory_mb = psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024
    except psutil.Error as e:
        logger.warning(f"⚠️ Could not read process memory: {e}")
        memory_mb = 0.0
    uptime = time.time() - _START_TIME

    msg = f"🏥 HEALTH ► mem={memory_mb:.1f}MB uptime={uptime:.0f}s"
    now = time.time()
    if now - _LAST_HEALTH_LOG_TS > 60:
        logger.info(msg)
        _LAST_HEALTH_LOG_TS = now
    else:
        logger.debug(msg)

    return HealthResponse(
        status="success",
        version=__version__,
        uptime_seconds=round(uptime, 1),
        memory_usage_mb=round(memory_mb, 1),
        region=settings.DEFAULT_REGION,
        geocoder=settings.GEOCODER,
    )
