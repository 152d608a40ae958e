"""Main GUI application object.

`JobifyApp` is built once at process start and handed to every view. It owns
the store, the alert timer, the API client and the persisted session, and
exposes the dispatchers the views call.

Async dispatchers follow one protocol: dispatch `*_BEGIN`, do the network
call, dispatch `*_SUCCESS` or `*_ERROR`, then arm the alert timer. A 401 is
owned by the transport's forced logout, so dispatchers never report it
again. No request error escapes a dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from jobify.api_client import AUTH_ENDPOINTS, JobsQuery, get_client
from jobify.config import Settings, get_settings
from jobify.errors import REQUEST_ERRORS, extract_error_message, is_unauthorized
from jobify.models.schemas import Credentials, JobDraft, ProfileUpdate, SessionPayload
from jobify.storage import SessionStorage
from jobify.utils.logger import setup_logging

from gui.actions import Action, ActionType
from gui.alerts import AlertController
from gui.state import AlertType, AppState, initial_state
from gui.store import Store
from gui.utils.async_tasks import TaskTracker
from gui.utils.logging import log

NO_JOB_SELECTED_TEXT = "Select a job to edit first."


class JobifyApp:
    """Application handle: state store plus the dispatchers that drive it."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[SessionStorage] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        setup_logging(self.settings.log_level)
        self.storage = storage or SessionStorage(self.settings.storage_url)
        self.store = Store(initial_state(self.storage.load_session()))
        self.alerts = AlertController(self.store, self.settings.alert_delay_seconds)
        self.client = get_client(
            token_getter=lambda: self.store.state.token,
            on_unauthorized=self.logout_user,
            settings=self.settings,
            transport=http_transport,
        )
        self.tasks = TaskTracker()

    @property
    def state(self) -> AppState:
        return self.store.state

    def _dispatch(self, action_type: ActionType, **payload: Any) -> AppState:
        return self.store.dispatch(Action(action_type, payload))

    # ------------------------------------------------------------------
    # Alerts and plain UI reductions
    # ------------------------------------------------------------------

    def display_alert(
        self, text: Optional[str] = None, alert_type: Optional[AlertType] = None
    ) -> None:
        self._dispatch(ActionType.DISPLAY_ALERT, alert_text=text, alert_type=alert_type)
        self.alerts.arm()

    def toggle_sidebar(self) -> None:
        self._dispatch(ActionType.TOGGLE_SIDEBAR)

    def handle_change(self, name: str, value: Any) -> None:
        self._dispatch(ActionType.HANDLE_CHANGE, name=name, value=value)

    def clear_values(self) -> None:
        self._dispatch(ActionType.CLEAR_VALUES)

    def clear_filters(self) -> None:
        self._dispatch(ActionType.CLEAR_FILTERS)

    def change_page(self, page: int) -> None:
        self._dispatch(ActionType.CHANGE_PAGE, page=page)

    def set_edit_job(self, job_id: str) -> None:
        """Load a listed job into the draft fields for editing."""
        if not any(job.id == job_id for job in self.state.jobs):
            log("set_edit_job: job %s is not in the current list", logging.WARNING, job_id)
        self._dispatch(ActionType.SET_EDIT_JOB, id=job_id)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def logout_user(self) -> None:
        self._dispatch(ActionType.LOGOUT_USER)
        self.storage.remove_user_from_storage()
        log("logged out")

    async def setup_user(
        self,
        credentials: Union[Credentials, Mapping[str, Any]],
        endpoint: str,
        alert_text: str,
    ) -> None:
        """
        Register or log in, then store and persist the session.

        Args:
            credentials: email/password (plus name for register)
            endpoint: "register" or "login"
            alert_text: Success message shown on the alert
        """
        if endpoint not in AUTH_ENDPOINTS:
            raise ValueError(f"Unknown auth endpoint: {endpoint!r}")
        try:
            body = Credentials.model_validate(credentials)
        except ValidationError:
            self.display_alert()
            return

        self._dispatch(ActionType.USER_OPERATION_BEGIN)
        try:
            session = await self.client.authenticate(endpoint, body)
        except REQUEST_ERRORS as exc:
            message = extract_error_message(exc)
            log("%s failed: %s", logging.WARNING, endpoint, message)
            self._dispatch(ActionType.USER_OPERATION_ERROR, msg=message)
        else:
            self._dispatch(
                ActionType.USER_OPERATION_SUCCESS,
                user=session.user,
                token=session.token,
                location=session.location,
                alert_text=alert_text,
            )
            self.storage.add_user_to_storage(session)
        finally:
            self.alerts.arm()

    async def update_user(self, profile: Union[ProfileUpdate, Mapping[str, Any]]) -> None:
        try:
            body = ProfileUpdate.model_validate(profile)
        except ValidationError:
            self.display_alert()
            return

        self._dispatch(ActionType.USER_UPDATE_BEGIN)
        try:
            session = await self.client.update_user(body)
        except REQUEST_ERRORS as exc:
            if is_unauthorized(exc):
                return
            message = extract_error_message(exc)
            log("profile update failed: %s", logging.WARNING, message)
            self._dispatch(ActionType.USER_UPDATE_ERROR, msg=message)
        else:
            self._dispatch(
                ActionType.USER_UPDATE_SUCCESS,
                user=session.user,
                token=session.token,
                location=session.location,
            )
            self.storage.add_user_to_storage(session)
        finally:
            self.alerts.arm()

    async def get_current_user(self) -> None:
        """Refresh the signed-in user from GET /user."""
        self._dispatch(ActionType.GET_CURRENT_USER_BEGIN)
        try:
            user = await self.client.get_current_user()
        except REQUEST_ERRORS as exc:
            log("could not load current user (%s), logging out", logging.WARNING,
                extract_error_message(exc))
            self.logout_user()
        else:
            state = self._dispatch(ActionType.GET_CURRENT_USER_SUCCESS, user=user)
            if state.token is not None:
                self.storage.add_user_to_storage(
                    SessionPayload(user=user, token=state.token, location=user.location)
                )
        finally:
            self.alerts.arm()

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def _draft(self, job: Union[JobDraft, Mapping[str, Any], None]) -> Optional[JobDraft]:
        state = self.state
        try:
            if job is None:
                return JobDraft(
                    position=state.position,
                    company=state.company,
                    job_location=state.job_location or state.user_location,
                    job_type=state.job_type,
                    status=state.status,
                )
            return JobDraft.model_validate(job)
        except ValidationError:
            return None

    async def create_job(self, job: Union[JobDraft, Mapping[str, Any], None] = None) -> None:
        """Create a job from `job`, or from the draft fields when omitted."""
        draft = self._draft(job)
        if draft is None:
            self.display_alert()
            return

        self._dispatch(ActionType.CREATE_JOB_BEGIN)
        try:
            await self.client.create_job(draft)
        except REQUEST_ERRORS as exc:
            if is_unauthorized(exc):
                return
            message = extract_error_message(exc)
            log("create job failed: %s", logging.WARNING, message)
            self._dispatch(ActionType.CREATE_JOB_ERROR, msg=message)
        else:
            self._dispatch(ActionType.CREATE_JOB_SUCCESS)
            self._dispatch(ActionType.CLEAR_VALUES)
        finally:
            self.alerts.arm()

    async def edit_job(self, job: Union[JobDraft, Mapping[str, Any], None] = None) -> None:
        """Save the job selected with set_edit_job()."""
        job_id = self.state.edit_job_id
        if not self.state.is_editing or not job_id:
            self.display_alert(NO_JOB_SELECTED_TEXT)
            return
        draft = self._draft(job)
        if draft is None:
            self.display_alert()
            return

        self._dispatch(ActionType.EDIT_JOB_BEGIN)
        try:
            await self.client.update_job(job_id, draft)
        except REQUEST_ERRORS as exc:
            if is_unauthorized(exc):
                return
            message = extract_error_message(exc)
            log("edit job %s failed: %s", logging.WARNING, job_id, message)
            self._dispatch(ActionType.EDIT_JOB_ERROR, msg=message)
        else:
            self._dispatch(ActionType.EDIT_JOB_SUCCESS)
            self._dispatch(ActionType.CLEAR_VALUES)
        finally:
            self.alerts.arm()

    async def get_jobs(self) -> None:
        """Fetch the current page of jobs.

        The list view has no degraded state without a session, so any failure
        logs out. If the requested page no longer exists (the result shrank),
        the reducer clamps the page and the list is fetched once more so the
        rows match it.
        """
        await self._load_jobs(refetch=True)

    async def _load_jobs(self, refetch: bool) -> None:
        state = self.state
        query = JobsQuery(
            page=state.page,
            status=state.filter_by_status,
            job_type=state.filter_by_job_type,
            sort=state.sort.value,
            search=state.search,
            limit=self.settings.jobs_page_limit,
        )

        stale = False
        self._dispatch(ActionType.GET_JOBS_BEGIN)
        try:
            page = await self.client.list_jobs(query)
        except REQUEST_ERRORS as exc:
            log("could not load jobs (%s), logging out", logging.WARNING,
                extract_error_message(exc))
            self.logout_user()
        else:
            state = self._dispatch(
                ActionType.GET_JOBS_SUCCESS,
                jobs=page.result,
                total_jobs=page.total,
                num_of_pages=page.num_of_pages,
            )
            stale = state.page != query.page
        finally:
            self.alerts.arm()

        if stale and refetch:
            log("page %d is past the last page, loading page %d", logging.DEBUG,
                query.page, self.state.page)
            await self._load_jobs(refetch=False)

    async def delete_job(self, job_id: str) -> None:
        self._dispatch(ActionType.DELETE_JOB_BEGIN)
        try:
            await self.client.delete_job(job_id)
        except REQUEST_ERRORS as exc:
            log("delete job %s failed (%s), logging out", logging.WARNING, job_id,
                extract_error_message(exc))
            self.logout_user()
            self.alerts.arm()
        else:
            # Deleting can shift page boundaries, so resync totals
            await self.get_jobs()

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def get_statistics(self) -> None:
        self._dispatch(ActionType.SHOW_STATS_BEGIN)
        try:
            stats = await self.client.get_stats()
        except REQUEST_ERRORS as exc:
            log("could not load stats (%s), logging out", logging.WARNING,
                extract_error_message(exc))
            self.logout_user()
        else:
            self._dispatch(
                ActionType.SHOW_STATS_SUCCESS,
                statistics=stats.statistics,
                monthly_applications=stats.monthly_applications,
            )
        finally:
            self.alerts.arm()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def spawn(self, coro: Awaitable[Any]) -> "asyncio.Task[Any]":
        """Run a dispatcher as a tracked task; cancelling it stops the spinner."""
        return self.tasks.spawn(
            coro, on_cancel=lambda: self._dispatch(ActionType.CANCEL_REQUEST)
        )

    async def cancel_pending(self) -> None:
        await self.tasks.cancel_all()

    async def aclose(self) -> None:
        await self.cancel_pending()
        self.alerts.close()
        await self.client.transport.aclose()

    async def __aenter__(self) -> "JobifyApp":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
