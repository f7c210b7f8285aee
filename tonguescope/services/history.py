"""
Read-side views over stored profiles.

Everything here is pure: no I/O, same input gives the same output.
Timestamps are fixed-width `yyyy-MM-dd HH:mm:ss` strings, so plain string
comparison orders them chronologically.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime

from tonguescope.core.constants import (
    CHART_DATE_FORMAT,
    HISTORY_TIMESTAMP_FORMAT,
    REDNESS_CHART_SCALE,
    UNKNOWN_DATE,
)
from tonguescope.models.analysis import AnalysisRecord
from tonguescope.models.profile import HistoryItem, Profile
from tonguescope.models.report import ChartData
from tonguescope.services.conditions import to_float_safely


def _date_part(timestamp: str) -> str:
    date = timestamp.split(" ")[0]
    return date or UNKNOWN_DATE


def project_all(profiles: Iterable[Profile]) -> list[HistoryItem]:
    """Flatten every profile's history into one feed, newest first."""
    items = [
        HistoryItem(
            id=f"{profile.name}-{timestamp}",
            profile=profile.name,
            age=profile.age,
            gender=profile.gender,
            timestamp=timestamp,
            date=_date_part(timestamp),
            analysis=analysis,
        )
        for profile in profiles
        for timestamp, analysis in profile.history.items()
    ]
    # sorted() is stable, so equal timestamps keep their input order
    return sorted(items, key=lambda item: item.timestamp, reverse=True)


def sorted_history(profile: Profile) -> list[tuple[str, AnalysisRecord]]:
    return sorted(profile.history.items(), key=lambda entry: entry[0], reverse=True)


def _short_date(timestamp: str) -> str:
    try:
        return datetime.strptime(timestamp, HISTORY_TIMESTAMP_FORMAT).strftime(CHART_DATE_FORMAT)
    except ValueError:
        return timestamp[:5]


def extract_chart_data(history: Mapping[str, AnalysisRecord]) -> ChartData:
    """Build chart series from a profile's history, oldest entry first."""
    entries = sorted(history.items(), key=lambda entry: entry[0])
    dates = [timestamp for timestamp, _ in entries]

    return ChartData(
        dates=dates,
        short_dates=[_short_date(timestamp) for timestamp in dates],
        nutrition_scores=[to_float_safely(analysis.nutrition_score) for _, analysis in entries],
        mantle_scores=[to_float_safely(analysis.mantle_score) for _, analysis in entries],
        redness_values=[to_float_safely(analysis.redness) * REDNESS_CHART_SCALE for _, analysis in entries],
        coating_percentages=[
            to_float_safely(analysis.white_coating.white_coating_percentage if analysis.white_coating else None)
            for _, analysis in entries
        ],
    )
