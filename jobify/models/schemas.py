"""Pydantic schemas to validate backend payloads and outbound bodies.

These schemas act as contracts at ingress points so we fail fast when
backend payloads change shape. Wire names stay camelCase through aliases;
Python code uses the snake_case field names.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    REMOTE = "remote"
    INTERNSHIP = "internship"


class JobStatus(str, Enum):
    PENDING = "pending"
    INTERVIEW = "interview"
    DECLINED = "declined"


class SortOption(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"
    A_Z = "a-z"
    Z_A = "z-a"


def _coerce_id(v: Any) -> str:
    if v is None or v == "":
        raise ValueError("id is required")
    return str(v)


class User(BaseModel):
    """Identity returned by the backend in the `user` response header.

    Unknown fields are kept so the persisted JSON blob round-trips unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    email: str
    last_name: Optional[str] = Field(default=None, alias="lastName")
    location: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> str:
        return _coerce_id(v)

    @field_validator("location", mode="before")
    @classmethod
    def location_not_null(cls, v: Any) -> str:
        return v or ""


class Job(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    position: str
    company: str
    status: str = JobStatus.PENDING.value
    job_type: str = Field(default=JobType.FULL_TIME.value, alias="jobType")
    job_location: str = Field(default="", alias="jobLocation")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> str:
        return _coerce_id(v)


class JobDraft(BaseModel):
    """Outbound body for creating or editing a job."""

    model_config = ConfigDict(populate_by_name=True)

    position: str
    company: str
    job_location: str = Field(default="", alias="jobLocation")
    job_type: JobType = Field(default=JobType.FULL_TIME, alias="jobType")
    status: JobStatus = JobStatus.PENDING

    @field_validator("position", "company")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class JobsPage(BaseModel):
    """Response of GET /jobs."""

    model_config = ConfigDict(populate_by_name=True)

    result: List[Job] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    num_of_pages: int = Field(default=1, alias="numOfPages")

    @field_validator("num_of_pages")
    @classmethod
    def at_least_one_page(cls, v: int) -> int:
        return max(1, v)


class MonthlyApplications(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int
    count: int = Field(ge=0)


class StatsPayload(BaseModel):
    """Response of GET /jobs/stats."""

    model_config = ConfigDict(populate_by_name=True)

    statistics: Dict[str, int] = Field(default_factory=dict)
    monthly_applications: List[MonthlyApplications] = Field(
        default_factory=list, alias="monthlyApplications"
    )


class SessionPayload(BaseModel):
    """The session triple: read from auth response headers or from storage."""

    user: User
    token: str = Field(min_length=1)
    location: str = ""

    @field_validator("location", mode="before")
    @classmethod
    def location_not_null(cls, v: Any) -> str:
        return v or ""


class Credentials(BaseModel):
    """Body for POST /register and POST /login."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: str
    password: str = Field(repr=False)
    location: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ProfileUpdate(BaseModel):
    """Body for PATCH /updateUser."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    location: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
