"""Application state container.

A single immutable tree owned by the store. Reductions build new instances
with `dataclasses.replace`; nothing mutates a state in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from jobify.api_client import ALL_FILTER
from jobify.models.schemas import (
    Job,
    JobStatus,
    JobType,
    MonthlyApplications,
    SessionPayload,
    SortOption,
    User,
)


class AlertType(str, Enum):
    SUCCESS = "success"
    DANGER = "danger"


JOB_TYPE_OPTIONS: Tuple[str, ...] = tuple(t.value for t in JobType)
STATUS_OPTIONS: Tuple[str, ...] = tuple(s.value for s in JobStatus)
SORT_OPTIONS: Tuple[str, ...] = tuple(s.value for s in SortOption)


@dataclass(frozen=True)
class AppState:
    """Holds the whole client state: session, UI flags, job draft and list."""

    # session
    user: Optional[User] = None
    token: Optional[str] = None
    user_location: str = ""

    # ui flags
    is_loading: bool = False
    show_alert: bool = False
    alert_text: str = ""
    alert_type: Optional[AlertType] = None
    show_sidebar: bool = False

    # job draft
    is_editing: bool = False
    edit_job_id: str = ""
    position: str = ""
    company: str = ""
    job_location: str = ""
    job_type: JobType = JobType.FULL_TIME
    status: JobStatus = JobStatus.PENDING

    # job list
    jobs: Tuple[Job, ...] = ()
    total_jobs: int = 0
    num_of_pages: int = 1
    page: int = 1

    # filtering, sorting, pagination
    search: str = ""
    filter_by_status: str = ALL_FILTER
    filter_by_job_type: str = ALL_FILTER
    sort: SortOption = SortOption.LATEST

    # statistics
    statistics: Dict[str, int] = field(default_factory=dict)
    monthly_applications: Tuple[MonthlyApplications, ...] = ()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None


def initial_state(session: Optional[SessionPayload] = None) -> AppState:
    """Process-start state, seeded from the stored session when there is one."""
    if session is None:
        return AppState()
    return AppState(
        user=session.user,
        token=session.token,
        user_location=session.location,
        job_location=session.location,
    )
