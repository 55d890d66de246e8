from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ContributionDay(BaseModel):
    """Single day cell of the contribution calendar."""

    model_config = ConfigDict(frozen=True)

    date: str
    count: int = Field(ge=0)
    level: int = Field(ge=0, le=4)
    color: str | None = None


class ContributionWeek(BaseModel):
    """Week column, as long as GitHub reported it (edge weeks may be short)."""

    model_config = ConfigDict(frozen=True)

    days: tuple[ContributionDay, ...]


class ContributionCalendar(BaseModel):
    """Normalized calendar; `total` is the sum of every day's count."""

    model_config = ConfigDict(frozen=True)

    weeks: tuple[ContributionWeek, ...]
    total: int = Field(ge=0)
