from fastapi import Request

from tonguescope.services.analysis_client import AnalysisClient
from tonguescope.services.profile_service import ProfileService


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_analysis_client(request: Request) -> AnalysisClient:
    return request.app.state.analysis_client
