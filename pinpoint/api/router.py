"""
Central API Router
Combines all API endpoints into a single router for main.py
"""
from fastapi import APIRouter

from pinpoint.api import logs
from pinpoint.api.endpoints import location, system

# Create the main API router
api_router = APIRouter()

api_router.include_router(location.router, prefix="/api/location", tags=["location"])
api_router.include_router(system.router, prefix="/api/system", tags=["system"])
api_router.include_router(logs.router, prefix="/api")


@api_router.get("/api")
async def api_root():
    """API root endpoint for discovery"""
    return {
        "message": "Pinpoint API v1.0",
        "documentation": "/docs",
        "endpoints": {
            "resolve": "/api/location/resolve - Initial pin for a property (stored, code, GPS, address, fallback)",
            "encode": "/api/location/encode - Coordinate to location code",
            "decode": "/api/location/decode - Location code (full, short or legacy) to coordinate",
            "distance": "/api/location/distance - Distance and conflict check between two positions",
            "regions": "/api/location/regions - Supported regions and geocoding providers",
            "health": "/api/system/health - System health check",
            "logs": "/api/logs/recent - Recent log records",
        },
    }
