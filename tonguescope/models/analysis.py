from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    """Remote API payload: every field optional, wire names kept, unknown fields preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CrackDetail(_WireModel):
    morph: str | None = Field(default=None, description="Path of the crack morphology image")
    score: str | None = None


class WhiteCoating(_WireModel):
    white_coating_percentage: float | None = None
    visualization_path: str | None = None
    severity: str | None = None


class PapillaeAnalysis(_WireModel):
    total_papillae: int | None = None
    avg_size: float | None = None
    avg_redness: float | None = None


class AnalysisRecord(_WireModel):
    """
    Snapshot of a remote tongue analysis at submission time.

    The store never interprets these fields; defaults for missing values
    are applied only when deriving reports and charts.
    """

    jaggedness: str | None = Field(default=None, alias="Jaggedness")
    cracks: CrackDetail | None = Field(default=None, alias="Cracks")
    redness: str | None = None
    summary: str | None = Field(default=None, alias="Summary")
    mantle_score: str | None = Field(default=None, alias="MantleScore")
    nutrition_score: str | None = Field(default=None, alias="NutritionScore")
    segmented_image_path: str | None = None
    white_coating: WhiteCoating | None = None
    papillae_analysis: PapillaeAnalysis | None = None


class HealthCheckResponse(BaseModel):
    status: str
    sam_model: str | None = None
    roboflow_client: str | None = None
