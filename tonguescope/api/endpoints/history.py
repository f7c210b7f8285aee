from fastapi import APIRouter, Depends, HTTPException

from tonguescope.api.deps import get_profile_service
from tonguescope.api.endpoints.profiles import identity_params
from tonguescope.models.profile import HistoryItem, ProfileIdentity
from tonguescope.models.report import TrackEntry, TrackResponse
from tonguescope.services.history import extract_chart_data, project_all, sorted_history
from tonguescope.services.profile_service import ProfileService

router = APIRouter(tags=["history"])


@router.get("/history", response_model=list[HistoryItem])
async def history_feed(service: ProfileService = Depends(get_profile_service)) -> list[HistoryItem]:
    """Analyses of every profile, newest first."""
    return project_all(await service.list_profiles())


@router.get("/profiles/track", response_model=TrackResponse)
async def track_profile(
    identity: ProfileIdentity = Depends(identity_params),
    service: ProfileService = Depends(get_profile_service),
) -> TrackResponse:
    profile = await service.find_profile(*identity.as_tuple())
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found.")

    entries = [TrackEntry(timestamp=timestamp, analysis=analysis) for timestamp, analysis in sorted_history(profile)]
    return TrackResponse(entries=entries, chart=extract_chart_data(profile.history))
