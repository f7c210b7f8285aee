import httpx
from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from tonguescope.api.deps import get_analysis_client
from tonguescope.models.analysis import HealthCheckResponse
from tonguescope.services.analysis_client import AnalysisClient, AnalysisPayloadError

router = APIRouter(tags=["health"])


@router.get("/health", summary="Simple readiness check")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/upstream", summary="Remote analysis API health", response_model=HealthCheckResponse)
async def upstream_health(client: AnalysisClient = Depends(get_analysis_client)) -> HealthCheckResponse:
    try:
        return await client.check_health()
    except (httpx.HTTPError, AnalysisPayloadError) as exc:
        logger.warning(f"Analysis API health check failed: {exc}")
        raise HTTPException(status_code=503, detail="Analysis API unavailable.")
