"""Schemas shared by the client and the GUI state layer."""
from .schemas import (
    Credentials,
    Job,
    JobDraft,
    JobsPage,
    JobStatus,
    JobType,
    MonthlyApplications,
    ProfileUpdate,
    SessionPayload,
    SortOption,
    StatsPayload,
    User,
)

__all__ = [
    "Credentials",
    "Job",
    "JobDraft",
    "JobsPage",
    "JobStatus",
    "JobType",
    "MonthlyApplications",
    "ProfileUpdate",
    "SessionPayload",
    "SortOption",
    "StatsPayload",
    "User",
]
