from enum import Enum

from pydantic import BaseModel, Field

from tonguescope.models.analysis import AnalysisRecord


class ConditionSeverity(str, Enum):
    NORMAL = "normal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ConditionResult(BaseModel):
    name: str
    description: str
    status: str
    confidence: float
    severity: ConditionSeverity


class AnalysisReport(BaseModel):
    conditions: list[ConditionResult] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    summary: str | None = None
    nutrition_score: int | None = None
    mantle_score: int | None = None


class ChartData(BaseModel):
    """Per-profile series for the tracking charts, oldest entry first."""

    dates: list[str] = Field(default_factory=list)
    short_dates: list[str] = Field(default_factory=list)
    nutrition_scores: list[float] = Field(default_factory=list)
    mantle_scores: list[float] = Field(default_factory=list)
    redness_values: list[float] = Field(default_factory=list)
    coating_percentages: list[float] = Field(default_factory=list)


class TrackEntry(BaseModel):
    timestamp: str
    analysis: AnalysisRecord


class TrackResponse(BaseModel):
    entries: list[TrackEntry] = Field(default_factory=list)
    chart: ChartData = Field(default_factory=ChartData)
