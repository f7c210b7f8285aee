import math

from tonguescope.core import constants as c
from tonguescope.models.analysis import AnalysisRecord
from tonguescope.models.report import AnalysisReport, ConditionResult, ConditionSeverity

TRACKING_TIP = "Track your tongue health over time using this app"


def to_float_safely(value: str | float | int | None) -> float:
    """
    Parse a loosely formatted number from the analysis payload.

    Accepts a trailing percent sign and surrounding whitespace. Anything that
    does not parse (or is not finite) reads as 0.0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = value.strip()
        if text.endswith("%"):
            text = text[:-1].strip()
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def _banded_severity(percent: float) -> ConditionSeverity:
    if percent < c.BAND_NORMAL_MAX:
        return ConditionSeverity.NORMAL
    if percent < c.BAND_MILD_MAX:
        return ConditionSeverity.MILD
    if percent < c.BAND_MODERATE_MAX:
        return ConditionSeverity.MODERATE
    return ConditionSeverity.SEVERE


def _redness_severity(percent: float) -> ConditionSeverity:
    if percent < c.REDNESS_MILD_MAX:
        return ConditionSeverity.MILD
    if percent < c.REDNESS_MODERATE_MAX:
        return ConditionSeverity.MODERATE
    if percent < c.REDNESS_NORMAL_MAX:
        return ConditionSeverity.NORMAL
    return ConditionSeverity.SEVERE


def _levels(analysis: AnalysisRecord) -> tuple[float, float, float, float]:
    coating = to_float_safely(analysis.white_coating.white_coating_percentage if analysis.white_coating else None)
    jaggedness = to_float_safely(analysis.jaggedness)
    cracks = to_float_safely(analysis.cracks.score if analysis.cracks else None)
    redness = to_float_safely(analysis.redness)
    return coating, jaggedness, cracks, redness


def derive_conditions(analysis: AnalysisRecord) -> list[ConditionResult]:
    coating, jaggedness, cracks, redness = _levels(analysis)

    coating_severity = _banded_severity(coating)
    reported = analysis.white_coating.severity if analysis.white_coating else None

    return [
        ConditionResult(
            name="White Coating",
            description=f"White coating present: {int(coating)}%",
            status=reported or coating_severity.label,
            confidence=coating / 100,
            severity=coating_severity,
        ),
        ConditionResult(
            name="Jaggedness",
            description=f"Edge irregularity: {int(jaggedness)}%",
            status="Concern" if jaggedness > c.JAGGEDNESS_CONCERN else "Normal",
            confidence=jaggedness / 100,
            severity=_banded_severity(jaggedness),
        ),
        ConditionResult(
            name="Cracks",
            description=f"Surface cracks detected: {int(cracks)}%",
            status="Concern" if cracks > c.CRACKS_CONCERN else "Normal",
            confidence=cracks / 100,
            severity=_banded_severity(cracks),
        ),
        ConditionResult(
            name="Redness",
            description=f"Tongue color: {int(redness)}%",
            status="Concern" if redness > c.REDNESS_CONCERN else "Normal",
            confidence=redness / 100,
            severity=_redness_severity(redness),
        ),
    ]


def derive_recommendations(analysis: AnalysisRecord) -> list[str]:
    coating, jaggedness, cracks, redness = _levels(analysis)
    recommendations: list[str] = []

    if coating > c.COATING_RECOMMEND:
        recommendations.append("Consider reducing intake of dairy products and processed foods")
        recommendations.append("Drink more water to help cleanse the digestive system")

    if jaggedness > c.JAGGEDNESS_RECOMMEND:
        recommendations.append("Practice stress reduction techniques like meditation or deep breathing")
        recommendations.append("Ensure adequate intake of B vitamins")

    if cracks > c.CRACKS_RECOMMEND:
        recommendations.append("Stay hydrated with at least 8 glasses of water daily")
        recommendations.append("Consider adding more moisture-rich foods to your diet")

    if redness > c.REDNESS_HIGH_RECOMMEND or redness < c.REDNESS_LOW_RECOMMEND:
        recommendations.append("Monitor your diet for foods that may cause irritation")
        recommendations.append("Follow up with a healthcare provider if abnormal color persists")

    recommendations.append(TRACKING_TIP)
    return recommendations


def _score(value: str | None) -> int | None:
    return None if value is None else int(to_float_safely(value))


def build_report(analysis: AnalysisRecord) -> AnalysisReport:
    """Everything the result screen shows for one analysis."""
    return AnalysisReport(
        conditions=derive_conditions(analysis),
        recommendations=derive_recommendations(analysis),
        summary=analysis.summary.replace("+", " ") if analysis.summary is not None else None,
        nutrition_score=_score(analysis.nutrition_score),
        mantle_score=_score(analysis.mantle_score),
    )
