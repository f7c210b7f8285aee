from fastapi import APIRouter, Depends, HTTPException, Query

from tonguescope.api.deps import get_profile_service
from tonguescope.models.profile import Profile, ProfileIdentity
from tonguescope.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


def identity_params(
    name: str = Query(..., description="Profile name (exact match)"),
    age: str = Query(...),
    gender: str = Query(...),
) -> ProfileIdentity:
    return ProfileIdentity(name=name, age=age, gender=gender)


@router.post("", response_model=Profile)
async def save_profile(payload: Profile, service: ProfileService = Depends(get_profile_service)) -> Profile:
    """Create a profile, or merge the given history into the stored one."""
    return await service.save_profile(payload)


@router.get("", response_model=list[Profile])
async def list_profiles(service: ProfileService = Depends(get_profile_service)) -> list[Profile]:
    return await service.list_profiles()


@router.get("/lookup", response_model=Profile)
async def lookup_profile(
    identity: ProfileIdentity = Depends(identity_params),
    service: ProfileService = Depends(get_profile_service),
) -> Profile:
    profile = await service.find_profile(*identity.as_tuple())
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found.")
    return profile


@router.delete("", status_code=200)
async def delete_profile(
    identity: ProfileIdentity = Depends(identity_params),
    service: ProfileService = Depends(get_profile_service),
):
    if not await service.delete_profile(*identity.as_tuple()):
        raise HTTPException(status_code=404, detail="Profile not found.")
    return {"detail": "Profile deleted successfully"}
