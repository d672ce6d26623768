"""Liveness and readiness endpoints."""

from typing import Any, Dict

from fastapi import APIRouter

from recipe_import.services.orchestrator import default_extractors

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """
    Readiness check, called before traffic is routed to this instance.

    Lists the HTML extraction stages in the order they run.
    """
    return {
        "status": "ready",
        "extractors": [extractor.name for extractor in default_extractors()],
    }
