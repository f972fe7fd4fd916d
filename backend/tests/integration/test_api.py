"""
Integration Tests for the HTTP API

Drives the application through TestClient: session resolution, cookies,
page endpoints and the error body shape.
"""

import pytest

from projecthub.core.config import settings
from projecthub.core.errors import log_error
from projecthub.data.demo import DEMO_USER_ID

API = settings.API_V1_STR

ACCOUNT = {"full_name": "Rita Researcher", "email": "rita@example.com", "password": "Fieldwork2026"}


def start_real_session(client, account=ACCOUNT):
    """Register an account and log in with it; the client keeps the cookies."""
    client.post(f"{API}/auth/register", json=account)
    response = client.post(
        f"{API}/auth/login",
        json={"email": account["email"], "password": account["password"]},
    )
    assert response.status_code == 200
    return response.json()["user"]


class TestHealth:
    """Tests for the liveness and readiness endpoints."""

    def test_live(self, client):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["service"] == "projecthub-api"

    def test_ready(self, client):
        response = client.get("/health/ready")

        body = response.json()
        assert response.status_code == 200
        assert body["checks"]["database"]["ok"] is True
        assert "realtime" in body

    def test_request_id_is_echoed(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"


class TestSessionResolution:
    """Tests for how a page load picks its mode."""

    def test_no_session_redirects_to_login(self, client):
        response = client.get(f"{API}/dashboard", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_demo_query(self, client):
        response = client.get(f"{API}/dashboard", params={"demo": "true"})

        body = response.json()
        assert response.status_code == 200
        assert body["mode"] == "demo"
        assert body["widgets"]["stats"]["data"]["total_projects"] == 5
        assert response.cookies.get(settings.STATE_DEMO_MODE_KEY) == "true"

    def test_stored_demo_flag_alone_is_not_a_session(self, client):
        client.cookies.set(settings.STATE_DEMO_MODE_KEY, "true")

        response = client.get(f"{API}/dashboard", follow_redirects=False)

        assert response.status_code == 307

    def test_real_session(self, client, make_token):
        client.cookies.set(settings.STATE_AUTH_TOKEN_KEY, make_token())

        response = client.get(f"{API}/projects")

        body = response.json()
        assert response.status_code == 200
        assert body["mode"] == "real"
        assert body["user"]["full_name"] == "real"
        assert body["total"] == 0

    def test_admin_is_sent_to_admin_page(self, client, make_token):
        client.cookies.set(
            settings.STATE_AUTH_TOKEN_KEY,
            make_token(user_id="user-admin", email="admin@example.com", app_metadata={"role": "admin"}),
        )

        response = client.get(f"{API}/dashboard", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == settings.ADMIN_URL

    def test_invalid_token_redirects(self, client):
        client.cookies.set(settings.STATE_AUTH_TOKEN_KEY, "not-a-token")

        response = client.get(f"{API}/tasks", follow_redirects=False)

        assert response.status_code == 307


class TestAuthentication:
    """Tests for registration, login and logout."""

    demo_credentials = {"email": "demo@projecthub.com", "password": settings.DEMO_USER_PASSWORD}
    account = ACCOUNT

    def _register(self, client, **overrides):
        return client.post(f"{API}/auth/register", json={**self.account, **overrides})

    def test_demo_login(self, client):
        response = client.post(f"{API}/auth/login", json=self.demo_credentials)

        body = response.json()
        assert response.status_code == 200
        assert body["mode"] == "demo"
        assert body["redirect"] == "/dashboard?demo=true"
        assert settings.STATE_AUTH_TOKEN_KEY in response.cookies

        dashboard = client.get(f"{API}/dashboard")
        assert dashboard.status_code == 200
        assert dashboard.json()["mode"] == "demo"

    def test_demo_login_wrong_password(self, client):
        response = client.post(
            f"{API}/auth/login",
            json={"email": "demo@projecthub.com", "password": "guess"},
        )

        assert response.status_code == 401
        assert settings.STATE_AUTH_TOKEN_KEY not in response.cookies

    def test_unknown_email(self, client):
        response = client.post(
            f"{API}/auth/login",
            json={"email": "stranger@example.com", "password": "Whatever123"},
        )

        body = response.json()
        assert response.status_code == 401
        assert set(body) >= {"error", "message", "details", "toast"}
        assert body["message"] == "Invalid email or password"

    def test_missing_password(self, client):
        self._register(client)

        response = client.post(f"{API}/auth/login", json={"email": self.account["email"]})

        assert response.status_code == 422
        assert response.json()["error"] == "ERR_VALIDATION"

    def test_register_then_login(self, client):
        registered = self._register(client)

        assert registered.status_code == 201
        assert registered.json()["user"]["role"] == "user"
        assert registered.json()["redirect"] == settings.LOGIN_URL
        assert "password" not in registered.text.lower()

        response = client.post(
            f"{API}/auth/login",
            json={"email": "RITA@example.com", "password": self.account["password"]},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["mode"] == "real"
        assert body["redirect"] == "/dashboard"
        assert client.get(f"{API}/profile").json()["profile"]["email"] == "rita@example.com"

    def test_wrong_password(self, client):
        self._register(client)

        response = client.post(
            f"{API}/auth/login",
            json={"email": self.account["email"], "password": "Fieldwork2025"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"
        assert settings.STATE_AUTH_TOKEN_KEY not in response.cookies

    def test_register_weak_password(self, client):
        response = self._register(client, password="fieldwork")

        body = response.json()
        assert response.status_code == 400
        assert body["error"] == "ERR_VALIDATION"
        assert body["message"] == (
            "Password must contain uppercase letters. Password must contain at least one number"
        )

    def test_register_duplicate_email(self, client):
        self._register(client)

        response = self._register(client, email="Rita@Example.com")

        assert response.status_code == 409
        assert response.json()["message"] == "Email already registered. Please login instead."

    def test_register_demo_email(self, client):
        response = self._register(client, email="demo@projecthub.com")

        assert response.status_code == 409

    def test_register_requires_every_field(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"email": "rita@example.com", "password": "Fieldwork2026"},
        )

        assert response.status_code == 422

    def test_logout_clears_session(self, client):
        client.post(f"{API}/auth/login", json=self.demo_credentials)

        response = client.post(f"{API}/auth/logout")

        assert response.json()["redirect"] == "/login"
        after = client.get(f"{API}/dashboard", follow_redirects=False)
        assert after.status_code == 307


class TestPages:
    """Tests for page endpoints and mutations in demo mode."""

    def test_create_task(self, client, demo_params):
        response = client.post(
            f"{API}/tasks",
            params=demo_params,
            json={"project_id": "proj-1", "title": "Write report", "priority": 5},
        )

        body = response.json()
        assert response.status_code == 201
        assert body["toast"]["message"] == 'Task "Write report" created'
        assert body["data"]["priority"] == "high"

    def test_demo_changes_do_not_persist(self, client, demo_params):
        client.post(f"{API}/tasks", params=demo_params, json={"project_id": "proj-1", "title": "Draft"})

        page = client.get(f"{API}/tasks", params=demo_params).json()

        assert page["total"] == 19

    def test_validation_error(self, client, demo_params):
        response = client.post(f"{API}/tasks", params=demo_params, json={"project_id": "proj-1"})

        body = response.json()
        assert response.status_code == 422
        assert body["error"] == "ERR_VALIDATION"

    def test_missing_project(self, client, demo_params):
        response = client.get(f"{API}/projects/proj-missing/details", params=demo_params)

        assert response.status_code == 404
        assert response.json()["error"] == "ERR_NOT_FOUND"

    def test_widget_refresh(self, client, demo_params):
        response = client.get(f"{API}/dashboard/widgets/stats", params=demo_params)

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_unknown_widget(self, client, demo_params):
        response = client.get(f"{API}/dashboard/widgets/weather", params=demo_params)

        assert response.status_code == 404

    def test_files_page(self, client, demo_params):
        body = client.get(f"{API}/files", params=demo_params).json()

        assert body["total_storage_label"] == "26.3 MB"

    def _timeline(self, count):
        return {"rows": [
            {
                "id": f"task-{i:04d}",
                "name": f"Field visit {i}, site survey",
                "start": "2026-01-01",
                "end": "2026-01-08",
                "progress": 50,
            }
            for i in range(count)
        ]}

    def _gantt_cookies(self, response):
        return [c for c in response.headers.get_list("set-cookie") if c.startswith(settings.STATE_GANTT_KEY)]

    def test_saved_timeline_cookie_stays_small(self, client, demo_params):
        response = client.put(f"{API}/projects/proj-1/timeline", params=demo_params, json=self._timeline(5))

        cookies = self._gantt_cookies(response)
        assert response.status_code == 200
        assert len(cookies) == 1
        assert len(cookies[0]) < 4096

    def test_oversized_timeline_is_rejected(self, client, demo_params):
        response = client.put(f"{API}/projects/proj-1/timeline", params=demo_params, json=self._timeline(60))

        assert response.status_code == 400
        assert response.json()["error"] == "ERR_VALIDATION"
        assert self._gantt_cookies(response) == []

    def test_read_notifications_cookie_stays_small(self, client, demo_params):
        ids = [f"update-{i:03d}-" + "x" * 40 for i in range(200)]

        response = client.post(f"{API}/notifications/read", params=demo_params, json={"ids": ids})

        cookies = [
            c for c in response.headers.get_list("set-cookie")
            if c.startswith(settings.STATE_NOTIFICATIONS_READ_KEY)
        ]
        assert response.status_code == 200
        assert len(cookies) == 1
        assert len(cookies[0]) < 4096


class TestRequiredColumns:
    """Clearing a required column is rejected the same way in both modes."""

    @pytest.fixture(params=["demo", "real"])
    def workspace(self, request, client, demo_params):
        if request.param == "demo":
            return demo_params, "proj-1", "task-1"
        start_real_session(client)
        project = client.post(
            f"{API}/projects",
            json={"title": "Field Study", "project_type": "Academic & Research"},
        ).json()["data"]
        task = client.post(
            f"{API}/tasks",
            json={"project_id": project["id"], "title": "Collect samples"},
        ).json()["data"]
        return {}, project["id"], task["id"]

    @pytest.mark.parametrize(
        "field", ["title", "project_type", "status", "visibility", "progress_percentage"]
    )
    def test_project(self, client, workspace, field):
        params, project_id, _ = workspace
        before = client.get(f"{API}/projects/{project_id}/details", params=params).json()["title"]

        response = client.patch(f"{API}/projects/{project_id}", params=params, json={field: None})

        assert response.status_code == 422
        assert response.json()["error"] == "ERR_VALIDATION"
        after = client.get(f"{API}/projects/{project_id}/details", params=params)
        assert after.json()["title"] == before

    @pytest.mark.parametrize("field", ["title", "status", "priority"])
    def test_task(self, client, workspace, field):
        params, _, task_id = workspace

        response = client.patch(f"{API}/tasks/{task_id}", params=params, json={field: None})

        assert response.status_code == 422
        assert response.json()["error"] == "ERR_VALIDATION"

    def test_nullable_column_can_be_cleared(self, client, workspace):
        params, project_id, _ = workspace

        response = client.patch(f"{API}/projects/{project_id}", params=params, json={"description": None})

        assert response.status_code == 200
        assert response.json()["data"]["description"] is None


class TestSearch:
    """Tests for the global search endpoint."""

    def test_demo_hits_link_back_to_pages(self, client, demo_params):
        response = client.get(f"{API}/search", params={**demo_params, "q": "Research"})

        body = response.json()
        assert response.status_code == 200
        assert body["page"] == "search"
        assert body["counts"] == {"projects": 1, "tasks": 3, "files": 1, "contacts": 0}
        assert body["projects"][0]["url"] == "/projects/proj-1?demo=true"
        assert body["files"][0]["url"] == "/projects/proj-1?demo=true#files"

    def test_contacts_link_to_chats(self, client, demo_params):
        body = client.get(f"{API}/search", params={**demo_params, "q": "petrova"}).json()

        assert [hit["id"] for hit in body["contacts"]] == ["contact-1"]
        assert body["contacts"][0]["url"] == "/chats?demo=true"

    def test_limit_cuts_lists_only(self, client, demo_params):
        body = client.get(f"{API}/search", params={**demo_params, "q": "research", "limit": 1}).json()

        assert len(body["tasks"]) == 1
        assert body["counts"]["tasks"] == 3
        assert body["total"] == 5

    def test_short_query(self, client, demo_params):
        body = client.get(f"{API}/search", params={**demo_params, "q": "r"}).json()

        assert body["total"] == 0
        assert body["projects"] == []

    def test_type_filter(self, client, demo_params):
        body = client.get(
            f"{API}/search",
            params={**demo_params, "q": "research", "type": "Corporate/Business"},
        ).json()

        assert body["counts"]["projects"] == 0

    def test_invalid_limit(self, client, demo_params):
        response = client.get(f"{API}/search", params={**demo_params, "q": "research", "limit": 0})

        assert response.status_code == 422

    def test_real_session_sees_own_records(self, client):
        start_real_session(client)
        client.post(f"{API}/projects", json={"title": "Soil Survey", "project_type": "Academic & Research"})

        body = client.get(f"{API}/search", params={"q": "soil"}).json()

        assert body["mode"] == "real"
        assert [hit["title"] for hit in body["projects"]] == ["Soil Survey"]
        assert body["projects"][0]["relevance"] == 6
        assert body["projects"][0]["url"].startswith("/projects/")


class TestDiagnostics:
    """Tests for the diagnostics endpoints."""

    def _seed_errors(self):
        log_error(RuntimeError("other user's failure"), page="/projects", user_id="user-other", mode="real")
        log_error(RuntimeError("unattributed failure"), page="/api/v1/tasks", action="POST")
        log_error(RuntimeError("demo widget failure"), page="stats", user_id=DEMO_USER_ID, mode="demo")
        log_error(RuntimeError("own failure"), page="tasks", user_id="user-real", mode="real")

    def test_errors(self, client, demo_params):
        body = client.get(f"{API}/diagnostics/errors", params=demo_params).json()

        assert body["errors"] == []
        assert body["total"] == 0

    def test_demo_visitor_sees_only_demo_errors(self, client, demo_params):
        self._seed_errors()

        body = client.get(f"{API}/diagnostics/errors", params=demo_params).json()

        assert [e["message"] for e in body["errors"]] == ["demo widget failure"]
        assert body["total"] == 1

    def test_user_sees_only_own_errors(self, client, make_token):
        self._seed_errors()
        client.cookies.set(settings.STATE_AUTH_TOKEN_KEY, make_token())

        body = client.get(f"{API}/diagnostics/errors").json()

        assert [e["message"] for e in body["errors"]] == ["own failure"]
        assert body["errors"][0]["mode"] == "real"

    def test_admin_sees_every_error(self, client, make_token):
        self._seed_errors()
        client.cookies.set(
            settings.STATE_AUTH_TOKEN_KEY,
            make_token(user_id="user-admin", email="admin@example.com", app_metadata={"role": "admin"}),
        )

        body = client.get(f"{API}/diagnostics/errors", params={"limit": 2}).json()

        assert [e["message"] for e in body["errors"]] == ["own failure", "demo widget failure"]
        assert body["total"] == 4

    def test_data_access(self, client, demo_params):
        body = client.get(f"{API}/diagnostics/data-access", params=demo_params).json()

        assert body["mode"] == "demo"
        assert body["health"]["mode"] == "demo"
