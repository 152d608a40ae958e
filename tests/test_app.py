"""End-to-end dispatcher tests against an in-process fake backend."""

import asyncio
import inspect
import json
import logging

import httpx
import pytest
import pytest_asyncio

from gui.actions import ActionType
from gui.app import NO_JOB_SELECTED_TEXT, JobifyApp
from gui.reducer import (
    DEFAULT_ALERT_TEXT,
    JOB_CREATED_TEXT,
    JOB_UPDATED_TEXT,
    LOGIN_SUCCESS_TEXT,
    PROFILE_UPDATED_TEXT,
)
from gui.state import AlertType
from jobify.database import set_item
from jobify.storage import TOKEN_KEY, USER_KEY, SessionStorage

from conftest import JOB_1, JOB_2, TOKEN, USER, auth_response, respond

CREDENTIALS = {"email": "a@b.com", "password": "secret"}
RATE_LIMITED = "Too many requests from this IP Address, please try again after 15 minutes."


def _build(settings, storage, backend) -> JobifyApp:
    return JobifyApp(
        settings=settings, storage=storage, http_transport=httpx.MockTransport(backend)
    )


@pytest_asyncio.fixture()
async def app(settings, storage, backend):
    application = _build(settings, storage, backend)
    try:
        yield application
    finally:
        await application.aclose()


@pytest_asyncio.fixture()
async def logged_in(settings, seeded_storage, backend):
    application = _build(settings, seeded_storage, backend)
    try:
        yield application
    finally:
        await application.aclose()


def _body(request: httpx.Request):
    return json.loads(request.content)


def _jobs_page(*jobs, total=None, pages=1):
    return respond(json={"result": list(jobs), "total": len(jobs) if total is None else total, "numOfPages": pages})


def _assert_silently_logged_out(app: JobifyApp) -> None:
    assert app.state.user is None
    assert app.state.token is None
    assert app.state.show_alert is False
    assert app.state.is_loading is False
    assert app.storage.load_session() is None


# ============================================================================
# Startup
# ============================================================================


class TestStartup:
    @pytest.mark.asyncio
    async def test_starts_logged_out_on_empty_storage(self, app):
        assert not app.state.is_authenticated

    @pytest.mark.asyncio
    async def test_restores_stored_session(self, logged_in):
        assert logged_in.state.is_authenticated
        assert logged_in.state.token == TOKEN
        assert logged_in.state.job_location == "Berlin"

    @pytest.mark.asyncio
    async def test_corrupt_storage_starts_logged_out(self, settings, storage, backend):
        db = storage._open()
        try:
            set_item(db, USER_KEY, "][")
            set_item(db, TOKEN_KEY, TOKEN)
        finally:
            db.close()

        async with _build(settings, storage, backend) as application:
            assert not application.state.is_authenticated

    @pytest.mark.asyncio
    async def test_unwritable_storage_starts_logged_out(self, settings, tmp_path, backend):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        storage = SessionStorage(f"sqlite:///{blocker / 'session.db'}")
        async with _build(settings, storage, backend) as application:
            assert not application.state.is_authenticated
            application.logout_user()


# ============================================================================
# Register / login
# ============================================================================


class TestSetupUser:
    @pytest.mark.asyncio
    async def test_login_success(self, app, backend):
        backend.on("POST", "login", auth_response())

        await app.setup_user(CREDENTIALS, "login", LOGIN_SUCCESS_TEXT)

        state = app.state
        assert state.is_authenticated and state.token == TOKEN
        assert state.user.email == "a@b.com"
        assert state.user_location == state.job_location == "Berlin"
        assert (state.show_alert, state.alert_type, state.alert_text) == (
            True,
            AlertType.SUCCESS,
            LOGIN_SUCCESS_TEXT,
        )
        assert state.is_loading is False
        assert app.storage.load_session().token == TOKEN

        (request,) = backend.requests
        assert _body(request) == CREDENTIALS
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_login_logs_user_id_not_email(self, app, backend, caplog):
        backend.on("POST", "login", auth_response())

        with caplog.at_level(logging.INFO, logger="jobify"):
            await app.setup_user(CREDENTIALS, "login", LOGIN_SUCCESS_TEXT)

        assert "user u1" in caplog.text
        assert "a@b.com" not in caplog.text

    @pytest.mark.asyncio
    async def test_register_sends_profile_fields(self, app, backend):
        backend.on("POST", "register", auth_response())

        await app.setup_user(
            {**CREDENTIALS, "name": "Ada", "lastName": "Lovelace"}, "register", "User Created!"
        )

        assert _body(backend.requests[0])["lastName"] == "Lovelace"
        assert app.state.alert_text == "User Created!"

    @pytest.mark.asyncio
    async def test_bad_credentials_show_backend_message(self, app, backend):
        backend.on("POST", "login", respond(401, json={"msg": "Invalid Credentials"}))

        await app.setup_user(CREDENTIALS, "login", LOGIN_SUCCESS_TEXT)

        assert not app.state.is_authenticated
        assert app.state.alert_type is AlertType.DANGER
        assert app.state.alert_text == "Invalid Credentials"
        assert app.storage.load_session() is None

    @pytest.mark.asyncio
    async def test_rate_limit_plain_text_is_shown(self, app, backend):
        backend.on("POST", "login", respond(429, text=RATE_LIMITED))

        await app.setup_user(CREDENTIALS, "login", LOGIN_SUCCESS_TEXT)

        assert app.state.alert_text == RATE_LIMITED

    @pytest.mark.asyncio
    async def test_missing_session_headers_is_an_error(self, app, backend):
        backend.on("POST", "login", respond(200, json={"user": USER}))

        await app.setup_user(CREDENTIALS, "login", LOGIN_SUCCESS_TEXT)

        assert not app.state.is_authenticated
        assert app.state.alert_text == "The server did not return a session."

    @pytest.mark.asyncio
    async def test_missing_values_send_nothing(self, app, backend):
        await app.setup_user({"email": "a@b.com"}, "login", LOGIN_SUCCESS_TEXT)

        assert backend.requests == []
        assert app.state.alert_text == DEFAULT_ALERT_TEXT
        assert app.state.is_loading is False

    @pytest.mark.asyncio
    async def test_unknown_endpoint_raises(self, app):
        with pytest.raises(ValueError):
            await app.setup_user(CREDENTIALS, "logout", LOGIN_SUCCESS_TEXT)

    @pytest.mark.asyncio
    async def test_alert_expires(self, app, backend):
        backend.on("POST", "login", respond(400, json={"msg": "nope"}))

        await app.setup_user(CREDENTIALS, "login", LOGIN_SUCCESS_TEXT)
        assert app.state.show_alert is True

        await asyncio.sleep(app.settings.alert_delay_seconds * 5)
        assert app.state.show_alert is False


# ============================================================================
# Profile
# ============================================================================


class TestProfile:
    @pytest.mark.asyncio
    async def test_update_user_refreshes_session(self, logged_in, backend):
        moved = {**USER, "location": "Paris"}
        backend.on("PATCH", "updateUser", auth_response(user=moved, token="tok-2"))

        await logged_in.update_user({"location": "Paris"})

        state = logged_in.state
        assert state.token == "tok-2"
        assert state.user_location == state.job_location == "Paris"
        assert state.alert_text == PROFILE_UPDATED_TEXT
        assert logged_in.storage.load_session().location == "Paris"

        (request,) = backend.requests
        assert request.headers["Authorization"] == f"Bearer {TOKEN}"
        assert _body(request) == {"location": "Paris"}

    @pytest.mark.asyncio
    async def test_update_validation_error_keeps_session(self, logged_in, backend):
        backend.on("PATCH", "updateUser", respond(400, json={"msg": "Please provide all values"}))

        await logged_in.update_user({"name": ""})

        assert logged_in.state.is_authenticated
        assert logged_in.state.alert_type is AlertType.DANGER
        assert logged_in.state.alert_text == "Please provide all values"

    @pytest.mark.asyncio
    async def test_get_current_user_from_body(self, logged_in, backend):
        backend.on("GET", "user", respond(json={"user": {**USER, "location": "Rome"}}))

        await logged_in.get_current_user()

        assert logged_in.state.user_location == "Rome"
        assert logged_in.state.token == TOKEN
        assert logged_in.storage.load_session().location == "Rome"

    @pytest.mark.asyncio
    async def test_logout_clears_state_and_storage(self, logged_in, backend):
        logged_in.logout_user()

        assert not logged_in.state.is_authenticated
        assert logged_in.storage.load_session() is None
        assert backend.requests == []


# ============================================================================
# Jobs
# ============================================================================


class TestCreateAndEdit:
    @pytest.mark.asyncio
    async def test_create_from_draft_fields(self, logged_in, backend):
        backend.on("POST", "jobs", respond(201, json={"job": JOB_1}))
        logged_in.handle_change("position", "Dev")
        logged_in.handle_change("company", "Acme")

        await logged_in.create_job()

        assert _body(backend.requests[0]) == {
            "position": "Dev",
            "company": "Acme",
            "jobLocation": "Berlin",
            "jobType": "full-time",
            "status": "pending",
        }
        state = logged_in.state
        assert state.alert_text == JOB_CREATED_TEXT
        assert (state.position, state.company) == ("", "")
        assert state.jobs == ()

    @pytest.mark.asyncio
    async def test_create_from_mapping(self, logged_in, backend):
        backend.on("POST", "jobs", respond(201, json={}))

        await logged_in.create_job({"position": "Dev", "company": "Acme", "jobType": "remote"})

        assert _body(backend.requests[0])["jobType"] == "remote"

    @pytest.mark.asyncio
    async def test_blank_job_sends_nothing(self, logged_in, backend):
        await logged_in.create_job({"position": "  ", "company": "Acme"})

        assert backend.requests == []
        assert logged_in.state.alert_text == DEFAULT_ALERT_TEXT

    @pytest.mark.asyncio
    async def test_create_error_keeps_draft(self, logged_in, backend):
        backend.on("POST", "jobs", respond(400, json={"msg": "Please provide all values"}))
        logged_in.handle_change("position", "Dev")
        logged_in.handle_change("company", "Acme")

        await logged_in.create_job()

        assert logged_in.state.alert_text == "Please provide all values"
        assert logged_in.state.position == "Dev"
        assert logged_in.state.is_authenticated

    @pytest.mark.asyncio
    async def test_edit_selected_job(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page(JOB_1, JOB_2))
        backend.on("PATCH", "jobs/j1", respond(json={"updatedJob": JOB_1}))
        await logged_in.get_jobs()

        logged_in.set_edit_job("j1")
        logged_in.handle_change("position", "Staff Developer")
        await logged_in.edit_job()

        (request,) = backend.calls("PATCH", "jobs/j1")
        assert _body(request) == {
            "position": "Staff Developer",
            "company": "Acme",
            "jobLocation": "Berlin",
            "jobType": "remote",
            "status": "interview",
        }
        assert logged_in.state.alert_text == JOB_UPDATED_TEXT
        assert logged_in.state.is_editing is False

    @pytest.mark.asyncio
    async def test_edit_without_selection(self, logged_in, backend):
        await logged_in.edit_job({"position": "Dev", "company": "Acme"})

        assert backend.requests == []
        assert logged_in.state.alert_text == NO_JOB_SELECTED_TEXT


class TestListAndDelete:
    @pytest.mark.asyncio
    async def test_get_jobs_sends_filters(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page(JOB_1, JOB_2, total=12, pages=2))
        logged_in.handle_change("search", "dev")
        logged_in.handle_change("filterByStatus", "pending")
        logged_in.handle_change("sort", "oldest")

        await logged_in.get_jobs()

        (request,) = backend.requests
        assert dict(request.url.params) == {
            "limit": "10",
            "page": "1",
            "status": "pending",
            "jobType": "all",
            "sort": "oldest",
            "search": "dev",
        }
        state = logged_in.state
        assert [job.id for job in state.jobs] == ["j1", "j2"]
        assert (state.total_jobs, state.num_of_pages) == (12, 2)

    @pytest.mark.asyncio
    async def test_get_jobs_omits_empty_search(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page())

        await logged_in.get_jobs()

        assert "search" not in backend.requests[0].url.params

    @pytest.mark.asyncio
    async def test_shrinking_result_refetches_last_page(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page(JOB_1, total=25, pages=3))
        await logged_in.get_jobs()
        logged_in.change_page(3)

        backend.on("GET", "jobs", _jobs_page(JOB_2, total=12, pages=2))
        await logged_in.get_jobs()

        pages = [r.url.params["page"] for r in backend.calls("GET", "jobs")]
        assert pages == ["1", "3", "2"]
        state = logged_in.state
        assert (state.page, state.num_of_pages) == (2, 2)
        assert [job.id for job in state.jobs] == ["j2"]

    @pytest.mark.asyncio
    async def test_new_search_starts_from_first_page(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page(JOB_1, JOB_2, total=25, pages=3))
        await logged_in.get_jobs()
        logged_in.change_page(3)

        backend.on("GET", "jobs", _jobs_page(JOB_1, total=1, pages=1))
        logged_in.handle_change("search", "backend")
        await logged_in.get_jobs()

        request = backend.requests[-1]
        assert request.url.params["page"] == "1"
        assert request.url.params["search"] == "backend"
        state = logged_in.state
        assert (state.page, state.num_of_pages, state.total_jobs) == (1, 1, 1)
        assert [job.id for job in state.jobs] == ["j1"]

    @pytest.mark.asyncio
    async def test_refetch_happens_only_once(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page(JOB_1, total=25, pages=3))
        await logged_in.get_jobs()
        logged_in.change_page(3)

        def shrinking(request):
            requested = int(request.url.params["page"])
            return httpx.Response(200, json={"result": [], "total": 0, "numOfPages": max(1, requested - 1)})

        backend.on("GET", "jobs", shrinking)
        await logged_in.get_jobs()

        pages = [r.url.params["page"] for r in backend.calls("GET", "jobs")]
        assert pages == ["1", "3", "2"]
        assert logged_in.state.page == 1
        assert logged_in.state.is_loading is False

    @pytest.mark.asyncio
    async def test_get_jobs_failure_logs_out(self, logged_in, backend):
        backend.on("GET", "jobs", respond(500, json={"msg": "boom"}))

        await logged_in.get_jobs()

        _assert_silently_logged_out(logged_in)

    @pytest.mark.asyncio
    async def test_delete_refetches_with_same_query(self, logged_in, backend):
        backend.on("GET", "jobs", _jobs_page(JOB_1, JOB_2))
        backend.on("DELETE", "jobs/j1", respond(json={"msg": "Success! Job removed"}))
        logged_in.handle_change("filter_by_job_type", "remote")
        await logged_in.get_jobs()

        backend.on("GET", "jobs", _jobs_page(JOB_2))
        await logged_in.delete_job("j1")

        first, second = backend.calls("GET", "jobs")
        assert first.url.params == second.url.params
        assert [job.id for job in logged_in.state.jobs] == ["j2"]

    @pytest.mark.asyncio
    async def test_delete_failure_logs_out(self, logged_in, backend):
        backend.on("DELETE", "jobs/j9", respond(404, json={"msg": "No job with id j9"}))

        await logged_in.delete_job("j9")

        _assert_silently_logged_out(logged_in)
        assert backend.calls("GET", "jobs") == []


# ============================================================================
# Statistics
# ============================================================================


class TestStatistics:
    @pytest.mark.asyncio
    async def test_stats_success(self, logged_in, backend):
        backend.on(
            "GET",
            "jobs/stats",
            respond(
                json={
                    "statistics": {"pending": 4, "interview": 2, "declined": 1},
                    "monthlyApplications": [
                        {"month": 1, "year": 2024, "count": 3},
                        {"month": 2, "year": 2024, "count": 4},
                    ],
                }
            ),
        )

        await logged_in.get_statistics()

        state = logged_in.state
        assert state.statistics == {"pending": 4, "interview": 2, "declined": 1}
        assert [m.count for m in state.monthly_applications] == [3, 4]
        assert state.is_loading is False

    @pytest.mark.asyncio
    async def test_malformed_stats_log_out(self, logged_in, backend):
        backend.on("GET", "jobs/stats", respond(json={"monthlyApplications": [{"month": 13}]}))

        await logged_in.get_statistics()

        _assert_silently_logged_out(logged_in)


# ============================================================================
# Forced logout
# ============================================================================


@pytest.mark.parametrize(
    "dispatcher,method,path,args",
    [
        ("update_user", "PATCH", "updateUser", ({"name": "Ada"},)),
        ("create_job", "POST", "jobs", ({"position": "Dev", "company": "Acme"},)),
        ("get_jobs", "GET", "jobs", ()),
        ("delete_job", "DELETE", "jobs/j1", ("j1",)),
        ("get_statistics", "GET", "jobs/stats", ()),
        ("get_current_user", "GET", "user", ()),
    ],
)
@pytest.mark.asyncio
async def test_401_is_a_silent_logout(logged_in, backend, dispatcher, method, path, args):
    backend.on(method, path, respond(401, json={"msg": "Authentication Invalid"}))

    await getattr(logged_in, dispatcher)(*args)

    _assert_silently_logged_out(logged_in)


# ============================================================================
# Concurrency
# ============================================================================


def _slow(delay, **kwargs):
    async def handler(request):
        await asyncio.sleep(delay)
        return httpx.Response(200, **kwargs)

    return handler


class TestInterleaving:
    @pytest.mark.asyncio
    async def test_stats_and_create_do_not_clobber_each_other(self, logged_in, backend):
        stats = {"statistics": {"pending": 1}, "monthlyApplications": []}
        backend.on("GET", "jobs/stats", _slow(0.02, json=stats))
        backend.on("POST", "jobs", _slow(0.01, json={}))
        logged_in.handle_change("position", "Dev")
        logged_in.handle_change("company", "Acme")

        await asyncio.gather(logged_in.get_statistics(), logged_in.create_job())

        state = logged_in.state
        assert state.statistics == {"pending": 1}
        assert state.alert_text == JOB_CREATED_TEXT
        assert state.position == ""
        assert state.is_loading is False
        assert state.is_authenticated

    @pytest.mark.asyncio
    async def test_cancelled_dispatcher_stops_loading(self, logged_in, backend):
        backend.on("GET", "jobs/stats", _slow(5, json={"statistics": {"pending": 9}}))
        seen = []
        logged_in.store.subscribe(lambda state, action: seen.append(action.type))

        logged_in.spawn(logged_in.get_statistics())
        await asyncio.sleep(0.01)
        assert logged_in.state.is_loading is True

        await logged_in.cancel_pending()

        assert logged_in.state.is_loading is False
        assert logged_in.state.statistics == {}
        assert logged_in.state.is_authenticated
        assert seen[-1] is ActionType.CANCEL_REQUEST
        assert len(logged_in.tasks) == 0

    @pytest.mark.asyncio
    async def test_failing_spawned_dispatcher_is_logged(self, app, caplog):
        with caplog.at_level(logging.ERROR, logger="jobify.gui"):
            task = app.spawn(app.setup_user(CREDENTIALS, "logout", LOGIN_SUCCESS_TEXT))
            await app.tasks.wait()

        assert isinstance(task.exception(), ValueError)
        failures = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(failures) == 1
        assert isinstance(failures[0].exc_info[1], ValueError)
        assert len(app.tasks) == 0

    @pytest.mark.asyncio
    async def test_spawn_returns_the_tracked_task(self, logged_in, backend):
        backend.on("GET", "jobs/stats", respond(json={"statistics": {}, "monthlyApplications": []}))

        task = logged_in.spawn(logged_in.get_statistics())

        assert isinstance(task, asyncio.Task)
        assert "Task" in str(inspect.signature(JobifyApp.spawn).return_annotation)
        await logged_in.tasks.wait()
        assert task.done() and task.exception() is None
        assert len(logged_in.tasks) == 0
