import httpx
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from loguru import logger
from pydantic import BaseModel, Field

from tonguescope.api.deps import get_analysis_client, get_profile_service
from tonguescope.core.security import redact_name
from tonguescope.models.analysis import AnalysisRecord
from tonguescope.models.profile import Profile, ProfileIdentity
from tonguescope.models.report import AnalysisReport
from tonguescope.services.analysis_client import AnalysisClient, AnalysisPayloadError
from tonguescope.services.conditions import build_report
from tonguescope.services.profile_service import ProfileService

router = APIRouter(tags=["analyses"])


class RecordAnalysisRequest(ProfileIdentity):
    timestamp: str | None = Field(default=None, description="History key; defaults to the current local time")
    analysis: AnalysisRecord


class AnalysisResponse(BaseModel):
    timestamp: str
    analysis: AnalysisRecord
    report: AnalysisReport


def _to_response(timestamp: str, analysis: AnalysisRecord) -> AnalysisResponse:
    return AnalysisResponse(timestamp=timestamp, analysis=analysis, report=build_report(analysis))


@router.post("/profiles/analyses", response_model=AnalysisResponse)
async def submit_analysis(
    name: str = Form(...),
    age: str = Form(...),
    gender: str = Form(...),
    image: UploadFile = File(...),
    client: AnalysisClient = Depends(get_analysis_client),
    service: ProfileService = Depends(get_profile_service),
) -> AnalysisResponse:
    """Send an image to the analysis API and store the result in the profile's history."""
    content = await image.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty image upload.")

    try:
        analysis = await client.analyze_image(
            image.filename or "tongue_image.jpg", content, image.content_type or "image/jpeg"
        )
    except (httpx.HTTPError, AnalysisPayloadError) as exc:
        logger.error(f"Analysis request failed for {redact_name(name)}: {exc}")
        raise HTTPException(status_code=502, detail="Analysis API request failed.")

    profile = Profile(name=name, age=age, gender=gender)
    timestamp, _ = await service.record_analysis(profile, analysis)
    return _to_response(timestamp, analysis)


@router.post("/profiles/analyses/record", response_model=AnalysisResponse)
async def record_analysis(
    payload: RecordAnalysisRequest, service: ProfileService = Depends(get_profile_service)
) -> AnalysisResponse:
    """Store an analysis that was obtained elsewhere."""
    profile = Profile(name=payload.name, age=payload.age, gender=payload.gender)
    if payload.timestamp is not None:
        await service.add_analysis(profile, payload.timestamp, payload.analysis)
        timestamp = payload.timestamp
    else:
        timestamp, _ = await service.record_analysis(profile, payload.analysis)
    return _to_response(timestamp, payload.analysis)


@router.post("/reports", response_model=AnalysisReport)
async def analysis_report(analysis: AnalysisRecord) -> AnalysisReport:
    return build_report(analysis)
