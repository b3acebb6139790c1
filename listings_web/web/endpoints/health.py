"""
Health checks - for load balancers and monitoring.
Liveness answers from the process alone; readiness also pings the database.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("")
async def health(request: Request):
    """Liveness: is the process up?"""
    return {"status": "ok", "app": request.app.state.settings.app_name}


@router.get("/ready")
async def ready(request: Request):
    """Readiness: can the database be reached?"""
    if not await request.app.state.context.ping():
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "unreachable"})
    return {"status": "ready", "database": "connected"}
