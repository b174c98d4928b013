from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from autoexpense.api.deps import get_container
from autoexpense.container import AppContainer

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Basic health check."""
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready(container: AppContainer = Depends(get_container)):
    """Readiness check with local store access."""
    try:
        await container.store.keys()
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "database": "disconnected", "error": type(e).__name__},
        )
    return {
        "status": "ready",
        "database": "connected",
        "storage_mode": container.config.mode.value,
        "mailbox": "connected" if container.gmail_client is not None else "not configured",
    }
