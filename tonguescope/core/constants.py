"""
Core constants used across the application. Keep these simple and documented.
"""

from typing import Final

# History keys are local timestamps in this fixed-width format, so string order == time order
HISTORY_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
CHART_DATE_FORMAT: Final[str] = "%m/%d"
UNKNOWN_DATE: Final[str] = "Unknown date"

# Redis keys (formatted with the configured prefix)
PROFILE_SEQ_KEY: Final[str] = "{prefix}profiles:seq"
PROFILE_IDENTITY_KEY: Final[str] = "{prefix}profiles:identity"
PROFILE_ROWS_KEY: Final[str] = "{prefix}profiles:rows"
PROFILE_ROW_KEY: Final[str] = "{prefix}profiles:row:{row_id}"

# Severity bands shared by coating, jaggedness and cracks (percent, upper bound exclusive)
BAND_NORMAL_MAX: Final[float] = 20.0
BAND_MILD_MAX: Final[float] = 40.0
BAND_MODERATE_MAX: Final[float] = 60.0

# Redness is "normal" in the middle of the scale, abnormal at both ends
REDNESS_MILD_MAX: Final[float] = 60.0
REDNESS_MODERATE_MAX: Final[float] = 70.0
REDNESS_NORMAL_MAX: Final[float] = 85.0

# Status thresholds ("Concern" above these)
JAGGEDNESS_CONCERN: Final[float] = 30.0
CRACKS_CONCERN: Final[float] = 30.0
REDNESS_CONCERN: Final[float] = 80.0

# Recommendation triggers
COATING_RECOMMEND: Final[float] = 40.0
JAGGEDNESS_RECOMMEND: Final[float] = 30.0
CRACKS_RECOMMEND: Final[float] = 20.0
REDNESS_LOW_RECOMMEND: Final[float] = 60.0
REDNESS_HIGH_RECOMMEND: Final[float] = 80.0

# Redness arrives on a 0-10 scale, charts plot 0-100
REDNESS_CHART_SCALE: Final[float] = 10.0
