"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as osrm_health_check
    return osrm_health_check


def _get_dispatcher():
    """Lazy import so the API starts even without a reachable broker."""
    from ...container import get_dispatcher
    return get_dispatcher()


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
def health_osrm() -> dict:
    """Check OSRM service health."""
    try:
        osrm_health_check = _get_osrm_health_check()
        return {"service": "osrm", "healthy": osrm_health_check(settings)}
    except Exception as e:
        return {"service": "osrm", "healthy": False, "error": str(e)}


@router.get("/health/queues", status_code=status.HTTP_200_OK)
def health_queues() -> dict:
    """Waiting jobs and recent outcomes for each channel queue."""
    try:
        return {"queues": _get_dispatcher().queue_stats()}
    except Exception as e:
        return {"queues": {}, "error": str(e)}


@router.get("/health/providers", status_code=status.HTTP_200_OK)
def health_providers() -> dict:
    """Report whether each delivery provider has credentials configured."""
    from ...services.delivery.providers import ResendEmailProvider, TwilioSmsProvider

    return {
        "email": ResendEmailProvider(settings).status(),
        "sms": TwilioSmsProvider(settings).status(),
    }
