from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class LanguageStats(BaseModel):
    """Aggregated usage of one language across the analysed repositories."""

    model_config = ConfigDict(frozen=True)

    name: str
    bytes: int = Field(ge=0)
    repo_count: int = Field(ge=0)
    percentage: float
    color: str | None = None


class RepoCounts(BaseModel):
    """Descriptive counts over one repository list snapshot."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    public: int = 0
    private: int = 0
    forks: int = 0
    non_forks: int = 0


class RateLimitInfo(BaseModel):
    """GraphQL rate-limit budget as last reported by GitHub."""

    model_config = ConfigDict(frozen=True)

    cost: int
    remaining: int
    reset_at: str


class LanguageStatsResult(BaseModel):
    """Language statistics ordered by percentage (high to low)."""

    model_config = ConfigDict(frozen=True)

    languages: tuple[LanguageStats, ...]
    total_bytes: int = Field(ge=0)
    total_repos: int = Field(ge=0)
    repo_counts: RepoCounts
    filtered_repo_counts: RepoCounts
    rate_limit: RateLimitInfo | None = None
