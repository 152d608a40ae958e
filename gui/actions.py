"""Action tags and the action record dispatched to the store."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ActionType(str, Enum):
    # ui
    DISPLAY_ALERT = "DISPLAY_ALERT"
    HIDE_ALERT = "HIDE_ALERT"
    TOGGLE_SIDEBAR = "TOGGLE_SIDEBAR"
    HANDLE_CHANGE = "HANDLE_CHANGE"
    CLEAR_VALUES = "CLEAR_VALUES"
    CLEAR_FILTERS = "CLEAR_FILTERS"
    CHANGE_PAGE = "CHANGE_PAGE"
    SET_EDIT_JOB = "SET_EDIT_JOB"
    CANCEL_REQUEST = "CANCEL_REQUEST"

    # user
    USER_OPERATION_BEGIN = "USER_OPERATION_BEGIN"
    USER_OPERATION_SUCCESS = "USER_OPERATION_SUCCESS"
    USER_OPERATION_ERROR = "USER_OPERATION_ERROR"
    USER_UPDATE_BEGIN = "USER_UPDATE_BEGIN"
    USER_UPDATE_SUCCESS = "USER_UPDATE_SUCCESS"
    USER_UPDATE_ERROR = "USER_UPDATE_ERROR"
    GET_CURRENT_USER_BEGIN = "GET_CURRENT_USER_BEGIN"
    GET_CURRENT_USER_SUCCESS = "GET_CURRENT_USER_SUCCESS"
    LOGOUT_USER = "LOGOUT_USER"

    # jobs
    CREATE_JOB_BEGIN = "CREATE_JOB_BEGIN"
    CREATE_JOB_SUCCESS = "CREATE_JOB_SUCCESS"
    CREATE_JOB_ERROR = "CREATE_JOB_ERROR"
    GET_JOBS_BEGIN = "GET_JOBS_BEGIN"
    GET_JOBS_SUCCESS = "GET_JOBS_SUCCESS"
    EDIT_JOB_BEGIN = "EDIT_JOB_BEGIN"
    EDIT_JOB_SUCCESS = "EDIT_JOB_SUCCESS"
    EDIT_JOB_ERROR = "EDIT_JOB_ERROR"
    DELETE_JOB_BEGIN = "DELETE_JOB_BEGIN"

    # statistics
    SHOW_STATS_BEGIN = "SHOW_STATS_BEGIN"
    SHOW_STATS_SUCCESS = "SHOW_STATS_SUCCESS"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Mapping[str, Any] = field(default_factory=dict)
