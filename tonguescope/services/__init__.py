"""
Profile history services.

The store persists profiles, the profile service merges writes into them,
and the history/conditions modules derive read-only views.
"""

from tonguescope.services.analysis_client import AnalysisClient
from tonguescope.services.profile_service import ProfileService, format_timestamp
from tonguescope.services.profile_store import ProfileStore

__all__ = [
    "AnalysisClient",
    "ProfileService",
    "ProfileStore",
    "format_timestamp",
]
