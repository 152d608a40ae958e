"""Pure reduction of (state, action) into the next state.

Each action tag owns a fixed set of fields; a reduction never touches fields
outside that set, so interleaved operations cannot clobber each other.
Unknown tags and unknown form fields are programming errors and raise.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Type

from jobify.api_client import ALL_FILTER
from jobify.models.schemas import JobStatus, JobType, SortOption

from gui.actions import Action, ActionType
from gui.state import AlertType, AppState

DEFAULT_ALERT_TEXT = "Please provide all values!"
LOGIN_SUCCESS_TEXT = "Login Successful! Redirecting..."
PROFILE_UPDATED_TEXT = "User Profile Updated!"
JOB_CREATED_TEXT = "New Job Created!"
JOB_UPDATED_TEXT = "Job Updated!"

Payload = Mapping[str, Any]
Handler = Callable[[AppState, Payload], AppState]


class UnknownActionError(ValueError):
    """Raised for an action tag the reducer does not know."""


class InvalidFieldError(ValueError):
    """Raised when HANDLE_CHANGE names an unknown field or carries a bad value."""


# ---------------------------------------------------------------------------
# Form fields
# ---------------------------------------------------------------------------


def _text(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidFieldError(f"{name} expects a string, got {type(value).__name__}")
    return value


def _choice(enum_cls: Type[Enum], allow_all: bool = False) -> Callable[[str, Any], Any]:
    def coerce(name: str, value: Any) -> Any:
        raw = value.value if isinstance(value, Enum) else value
        if allow_all and raw == ALL_FILTER:
            return ALL_FILTER
        try:
            member = enum_cls(raw)
        except ValueError:
            raise InvalidFieldError(f"{value!r} is not a valid value for {name}") from None
        return member.value if allow_all else member

    return coerce


EDITABLE_FIELDS: Dict[str, Callable[[str, Any], Any]] = {
    "position": _text,
    "company": _text,
    "job_location": _text,
    "job_type": _choice(JobType),
    "status": _choice(JobStatus),
    "search": _text,
    "filter_by_status": _choice(JobStatus, allow_all=True),
    "filter_by_job_type": _choice(JobType, allow_all=True),
    "sort": _choice(SortOption),
}

# A new query starts again from the first page
LIST_QUERY_FIELDS = frozenset({"search", "filter_by_status", "filter_by_job_type", "sort"})

# Form inputs are named after the wire fields
FIELD_ALIASES = {
    "jobLocation": "job_location",
    "jobType": "job_type",
    "filterByStatus": "filter_by_status",
    "filterByJobType": "filter_by_job_type",
}


def _enum_or_default(enum_cls: Type[Enum], value: Any, default: Enum) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

_ALERT_CLEARED = {"show_alert": False, "alert_text": "", "alert_type": None}


def _success_alert(text: str) -> Dict[str, Any]:
    return {"show_alert": True, "alert_type": AlertType.SUCCESS, "alert_text": text}


def _display_alert(state: AppState, payload: Payload) -> AppState:
    return replace(
        state,
        show_alert=True,
        alert_type=AlertType(payload.get("alert_type") or AlertType.DANGER),
        alert_text=payload.get("alert_text") or DEFAULT_ALERT_TEXT,
    )


def _hide_alert(state: AppState, payload: Payload) -> AppState:
    return replace(state, **_ALERT_CLEARED)


def _toggle_sidebar(state: AppState, payload: Payload) -> AppState:
    return replace(state, show_sidebar=not state.show_sidebar)


def _handle_change(state: AppState, payload: Payload) -> AppState:
    name = payload.get("name")
    name = FIELD_ALIASES.get(name, name)
    coerce = EDITABLE_FIELDS.get(name)
    if coerce is None:
        raise InvalidFieldError(f"{name!r} is not an editable field")
    changes: Dict[str, Any] = {name: coerce(name, payload.get("value"))}
    if name in LIST_QUERY_FIELDS:
        changes["page"] = 1
    return replace(state, **changes)


def _clear_values(state: AppState, payload: Payload) -> AppState:
    return replace(
        state,
        is_editing=False,
        edit_job_id="",
        position="",
        company="",
        job_location=state.user_location,
        job_type=JobType.FULL_TIME,
        status=JobStatus.PENDING,
    )


def _clear_filters(state: AppState, payload: Payload) -> AppState:
    return replace(
        state,
        search="",
        filter_by_status=ALL_FILTER,
        filter_by_job_type=ALL_FILTER,
        sort=SortOption.LATEST,
    )


def _change_page(state: AppState, payload: Payload) -> AppState:
    page = payload.get("page")
    if isinstance(page, bool) or not isinstance(page, int):
        return state
    if not 1 <= page <= state.num_of_pages:
        return state
    return replace(state, page=page)


def _set_edit_job(state: AppState, payload: Payload) -> AppState:
    job_id = payload.get("id")
    job = next((j for j in state.jobs if j.id == job_id), None)
    if job is None:
        return state
    return replace(
        state,
        is_editing=True,
        edit_job_id=job.id,
        position=job.position,
        company=job.company,
        job_location=job.job_location,
        job_type=_enum_or_default(JobType, job.job_type, JobType.FULL_TIME),
        status=_enum_or_default(JobStatus, job.status, JobStatus.PENDING),
    )


def _stop_loading(state: AppState, payload: Payload) -> AppState:
    return replace(state, is_loading=False)


def _begin(state: AppState, payload: Payload) -> AppState:
    changes: Dict[str, Any] = {"is_loading": True}
    if state.show_alert and state.alert_type is AlertType.DANGER:
        changes.update(_ALERT_CLEARED)
    return replace(state, **changes)


def _error(state: AppState, payload: Payload) -> AppState:
    return replace(
        state,
        is_loading=False,
        show_alert=True,
        alert_type=AlertType.DANGER,
        alert_text=payload.get("msg") or DEFAULT_ALERT_TEXT,
    )


def _session_success(default_text: str) -> Handler:
    def handler(state: AppState, payload: Payload) -> AppState:
        user, token = payload.get("user"), payload.get("token")
        if user is None or not token:
            raise ValueError("a session needs both a user and a token")
        location = payload.get("location") or ""
        return replace(
            state,
            is_loading=False,
            user=user,
            token=token,
            user_location=location,
            job_location=location,
            **_success_alert(payload.get("alert_text") or default_text),
        )

    return handler


def _current_user_success(state: AppState, payload: Payload) -> AppState:
    # A forced logout may have landed while the request was in flight
    if state.token is None:
        return replace(state, is_loading=False)
    user = payload["user"]
    return replace(state, is_loading=False, user=user, user_location=user.location)


def _logout(state: AppState, payload: Payload) -> AppState:
    return replace(
        AppState(),
        show_alert=state.show_alert,
        alert_text=state.alert_text,
        alert_type=state.alert_type,
        show_sidebar=state.show_sidebar,
    )


def _job_saved(text: str) -> Handler:
    def handler(state: AppState, payload: Payload) -> AppState:
        return replace(state, is_loading=False, **_success_alert(text))

    return handler


def _get_jobs_success(state: AppState, payload: Payload) -> AppState:
    num_of_pages = max(1, int(payload.get("num_of_pages", 1)))
    return replace(
        state,
        is_loading=False,
        jobs=tuple(payload.get("jobs", ())),
        total_jobs=max(0, int(payload.get("total_jobs", 0))),
        num_of_pages=num_of_pages,
        page=min(state.page, num_of_pages),
    )


def _show_stats_success(state: AppState, payload: Payload) -> AppState:
    return replace(
        state,
        is_loading=False,
        statistics=dict(payload.get("statistics", {})),
        monthly_applications=tuple(payload.get("monthly_applications", ())),
    )


_HANDLERS: Dict[ActionType, Handler] = {
    ActionType.DISPLAY_ALERT: _display_alert,
    ActionType.HIDE_ALERT: _hide_alert,
    ActionType.TOGGLE_SIDEBAR: _toggle_sidebar,
    ActionType.HANDLE_CHANGE: _handle_change,
    ActionType.CLEAR_VALUES: _clear_values,
    ActionType.CLEAR_FILTERS: _clear_filters,
    ActionType.CHANGE_PAGE: _change_page,
    ActionType.SET_EDIT_JOB: _set_edit_job,
    ActionType.CANCEL_REQUEST: _stop_loading,
    ActionType.USER_OPERATION_BEGIN: _begin,
    ActionType.USER_OPERATION_SUCCESS: _session_success(LOGIN_SUCCESS_TEXT),
    ActionType.USER_OPERATION_ERROR: _error,
    ActionType.USER_UPDATE_BEGIN: _begin,
    ActionType.USER_UPDATE_SUCCESS: _session_success(PROFILE_UPDATED_TEXT),
    ActionType.USER_UPDATE_ERROR: _error,
    ActionType.GET_CURRENT_USER_BEGIN: _begin,
    ActionType.GET_CURRENT_USER_SUCCESS: _current_user_success,
    ActionType.LOGOUT_USER: _logout,
    ActionType.CREATE_JOB_BEGIN: _begin,
    ActionType.CREATE_JOB_SUCCESS: _job_saved(JOB_CREATED_TEXT),
    ActionType.CREATE_JOB_ERROR: _error,
    ActionType.GET_JOBS_BEGIN: _begin,
    ActionType.GET_JOBS_SUCCESS: _get_jobs_success,
    ActionType.EDIT_JOB_BEGIN: _begin,
    ActionType.EDIT_JOB_SUCCESS: _job_saved(JOB_UPDATED_TEXT),
    ActionType.EDIT_JOB_ERROR: _error,
    ActionType.DELETE_JOB_BEGIN: _begin,
    ActionType.SHOW_STATS_BEGIN: _begin,
    ActionType.SHOW_STATS_SUCCESS: _show_stats_success,
}


def reduce(state: AppState, action: Action) -> AppState:
    """Return the state that follows `action`. Never mutates `state`."""
    handler = _HANDLERS.get(action.type)
    if handler is None:
        raise UnknownActionError(f"No reduction for action {action.type!r}")
    return handler(state, action.payload)
