"""
Health and metrics API routes.
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, Response

from tasktrack.dependencies.services import get_db
from tasktrack.monitoring import get_health_info, get_metrics, metrics_adapter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint with component status (task store, service)."""
    health_info = get_health_info(get_db())

    if health_info.get("status") == "unhealthy":
        return JSONResponse(
            content=health_info,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return health_info


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=get_metrics(),
        media_type=metrics_adapter.get_content_type()
    )
