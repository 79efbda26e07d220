from datetime import date, datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict

ContributionSource = Literal["graphql_calendar", "events_heuristic"]


class Profile(BaseModel):
    """
    Immutable snapshot of a GitHub account, built fresh on every fetch.
    """
    model_config = ConfigDict(frozen=True)

    login: str = Field(..., description="Unique login name of the account")
    name: Optional[str] = Field(None, description="Display name")
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    bio: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    blog: Optional[str] = None
    hireable: Optional[bool] = None
    followers: int = Field(0, ge=0)
    following: int = Field(0, ge=0)
    public_repos: int = Field(0, ge=0)
    created_at: Optional[datetime] = Field(None, description="Account creation timestamp")


class Repository(BaseModel):
    """
    One repository record. `latest_commit` stays None unless the repository
    was selected for commit enrichment.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="The numeric REST id of the repository")
    name: str
    description: Optional[str] = None
    language: Optional[str] = Field(None, description="Primary language reported by GitHub")
    stars: int = Field(0, ge=0, description="Total number of stargazers")
    forks: int = Field(0, ge=0)
    updated_at: Optional[datetime] = None
    html_url: Optional[str] = None
    fork: bool = False
    latest_commit: Optional[str] = Field(None, description="Message of the most recent commit")


class LanguageStats(BaseModel):
    """
    Aggregated language usage across a sample of repositories.
    `degraded` marks an empty result produced because aggregation failed.
    """
    model_config = ConfigDict(frozen=True)

    bytes_per_language: Dict[str, int] = Field(default_factory=dict)
    repos_per_language: Dict[str, int] = Field(default_factory=dict)
    degraded: bool = False

    @classmethod
    def empty(cls, degraded: bool = False) -> "LanguageStats":
        return cls(bytes_per_language={}, repos_per_language={}, degraded=degraded)


class ContributionDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(0, ge=0)


class ContributionRecord(BaseModel):
    """
    A gap-free, strictly ascending sequence of daily contribution counts.
    `source` names the strategy that produced it.
    """
    model_config = ConfigDict(frozen=True)

    days: List[ContributionDay] = Field(default_factory=list)
    source: ContributionSource

    @property
    def total(self) -> int:
        return sum(day.count for day in self.days)


class UserBundle(BaseModel):
    """Everything the profile view needs for one username."""
    model_config = ConfigDict(frozen=True)

    profile: Profile
    repositories: List[Repository] = Field(default_factory=list)
    language_stats: LanguageStats = Field(default_factory=LanguageStats)


class LanguageShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    bytes: int = Field(0, ge=0)
    repo_count: int = Field(0, ge=0)
    percentage: float = Field(0.0, ge=0.0, le=100.0)
