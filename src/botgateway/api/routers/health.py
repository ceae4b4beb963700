"""
Health check endpoints.
"""

from datetime import datetime

from fastapi import APIRouter

from ...services.retrieval import get_chroma_client
from ...shared import get_database, get_metrics, get_settings
from ..models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns:
        System health status
    """
    services = {}
    settings = get_settings()

    try:
        if settings.storage_backend == "postgres":
            db_stats = get_database().get_connection_stats()
            services["storage"] = "connected" if db_stats else "disconnected"
        else:
            services["storage"] = "memory"
    except Exception as e:
        services["storage"] = f"error: {str(e)}"

    try:
        get_chroma_client().heartbeat()
        services["vector_index"] = "ready"
    except Exception as e:
        services["vector_index"] = f"error: {str(e)}"

    try:
        get_metrics()
        services["metrics"] = "collecting" if settings.enable_metrics else "disabled"
    except Exception as e:
        services["metrics"] = f"error: {str(e)}"

    error_services = [name for name, status in services.items() if "error" in status]
    overall_status = "unhealthy" if error_services else "healthy"

    return HealthResponse(
        status=overall_status,
        services=services,
        timestamp=datetime.utcnow().isoformat() + "Z"
    )


@router.get("/health/detailed")
async def detailed_health_check():
    """
    Health check with collected metrics.
    """
    health = await health_check()
    return {
        "health": health.model_dump(),
        "metrics": get_metrics().get_all_metrics(),
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }
