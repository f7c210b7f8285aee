from pydantic import BaseModel, Field

from tonguescope.models.analysis import AnalysisRecord


class ProfileIdentity(BaseModel):
    """Natural key of a profile. Matched exactly and case-sensitively."""

    name: str
    age: str
    gender: str

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.name, self.age, self.gender)


class Profile(ProfileIdentity):
    history: dict[str, AnalysisRecord] = Field(
        default_factory=dict, description="Timestamp (yyyy-MM-dd HH:mm:ss) → analysis"
    )

    @property
    def identity(self) -> ProfileIdentity:
        return ProfileIdentity(name=self.name, age=self.age, gender=self.gender)


class HistoryItem(BaseModel):
    id: str
    profile: str
    age: str
    gender: str
    timestamp: str
    date: str
    analysis: AnalysisRecord
