"""
HTTP API tests.

The app is built around the per-test container and called in-process
through httpx's ASGI transport.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from studytimer.config import settings
from studytimer.main import create_app

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def client(container):
    app = create_app(container)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def task(client) -> dict:
    group = await client.post("/api/groups", json={"name": "Math"})
    response = await client.post(
        "/api/tasks", json={"name": "Calculus", "group_id": group.json()["id"]}
    )
    assert response.status_code == 201
    return response.json()


async def run_session(client, task_id: int, **finish_fields) -> dict:
    started = await client.post("/api/sessions/start", json={"task_id": task_id, "cycles": 2})
    assert started.status_code == 201
    body = {
        "task_id": task_id,
        "total_work_minutes": 50,
        "current_cycle": 2,
        "total_cycles": 2,
        "is_session_completed": True,
        "completion_date": "2024-03-13",
    }
    body.update(finish_fields)
    finished = await client.post(f"/api/sessions/{started.json()['session_id']}/finish", json=body)
    assert finished.status_code == 200, finished.text
    return finished.json()


class TestHealth:
    async def test_root_and_health(self, client):
        assert (await client.get("/")).status_code == 200
        response = await client.get("/api/health")

        assert response.json()["status"] == "healthy"

    async def test_detailed_health_checks_database(self, client):
        response = await client.get("/api/health/detailed")

        assert response.json()["dependencies"]["database"]["status"] == "healthy"


class TestTasks:
    async def test_create_and_read(self, client, task):
        response = await client.get(f"/api/tasks/{task['id']}")

        assert response.status_code == 200
        assert response.json()["group_name"] == "Math"
        assert [t["id"] for t in (await client.get("/api/tasks")).json()] == [task["id"]]

    async def test_patch_schedule(self, client, task):
        response = await client.patch(
            f"/api/tasks/{task['id']}",
            json={"schedule_type": "repeat", "repeat_days": [3, 1]},
        )

        assert response.status_code == 200
        assert sorted(response.json()["repeat_days"]) == [1, 3]
        scheduled = await client.get("/api/tasks/scheduled", params={"day": "2024-03-13"})
        assert [t["id"] for t in scheduled.json()] == [task["id"]]

    async def test_progress_and_deactivate(self, client, task):
        progress = await client.put(
            f"/api/tasks/{task['id']}/progress",
            json={"progress_note": "Limits done", "progress_percent": 30},
        )
        deactivated = await client.post(f"/api/tasks/{task['id']}/deactivate")

        assert progress.json()["progress_percent"] == 30
        assert deactivated.json()["success"] is True
        assert (await client.get("/api/tasks")).json() == []

    async def test_delete(self, client, task):
        assert (await client.delete(f"/api/tasks/{task['id']}")).status_code == 200
        assert (await client.get(f"/api/tasks/{task['id']}")).status_code == 404

    async def test_today(self, client):
        await client.post(
            "/api/tasks",
            json={"name": "Essay", "schedule_type": "deadline", "deadline_date": "2024-03-15"},
        )

        today = (await client.get("/api/tasks/today", params={"day": "2024-03-13"})).json()

        assert today["total_count"] == 0
        assert [t["name"] for t in today["upcoming_deadlines"]] == ["Essay"]

    async def test_unknown_group_is_404(self, client):
        response = await client.post("/api/tasks", json={"name": "Orphan", "group_id": 999})

        assert response.status_code == 404


class TestSessions:
    async def test_finish_schedules_reviews_for_free_plan(self, client, task):
        finished = await run_session(client, task["id"])

        assert finished["session"]["cycles_completed"] == 2
        assert finished["daily_stats"]["subject_breakdown"] == {"Math": 50}
        assert finished["reminders_created"] == 2
        assert finished["review_dates"] == ["2024-03-14", "2024-03-16"]

    async def test_session_state(self, client, task):
        finished = await run_session(client, task["id"])
        session_id = finished["session"]["id"]

        state = await client.get(f"/api/sessions/{session_id}/state")
        unknown = await client.get("/api/sessions/999/state")

        assert state.json()["state"] == "finished"
        assert unknown.json()["state"] == "not_started"

    async def test_finishing_twice_is_422(self, client, task):
        finished = await run_session(client, task["id"])
        session_id = finished["session"]["id"]

        again = await client.post(
            f"/api/sessions/{session_id}/finish",
            json={"task_id": task["id"], "total_work_minutes": 50, "current_cycle": 2, "total_cycles": 2},
        )

        assert again.status_code == 422
        assert again.json()["details"]["field"] == "session_id"

    async def test_start_for_unknown_task_is_404(self, client):
        response = await client.post("/api/sessions/start", json={"task_id": 999})

        assert response.status_code == 404


class TestReviews:
    async def test_list_complete_and_reschedule(self, client, task):
        await run_session(client, task["id"])

        listing = (
            await client.get("/api/reviews", params={"filter": "pending", "day": "2024-03-13"})
        ).json()
        first_id = listing["reviews"][0]["id"]
        completed = await client.post(f"/api/reviews/{first_id}/complete")
        moved = await client.post(
            f"/api/reviews/{first_id}/reschedule", json={"scheduled_date": "2024-03-20"}
        )

        assert listing["counts"] == {"total": 2, "pending": 2, "completed": 0, "overdue": 0}
        assert listing["reviews"][0]["task_name"] == "Calculus"
        assert completed.json()["is_completed"] is True
        assert moved.json()["scheduled_date"] == "2024-03-20"

    async def test_missing_review_is_404(self, client):
        response = await client.post("/api/reviews/999/complete")

        assert response.status_code == 404


class TestStatsAndCalendar:
    async def test_daily_stats(self, client, task):
        await run_session(client, task["id"])

        studied = (await client.get("/api/stats/daily", params={"day": "2024-03-13"})).json()
        empty = (await client.get("/api/stats/daily", params={"day": "2024-03-12"})).json()

        assert studied["total_study_minutes"] == 50
        assert empty["total_study_minutes"] == 0

    async def test_reversed_range_is_422(self, client):
        response = await client.get(
            "/api/stats/range", params={"start": "2024-03-13", "end": "2024-03-01"}
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    async def test_weekly(self, client):
        week = (await client.get("/api/stats/weekly", params={"week_start": "2024-03-11"})).json()

        assert len(week) == 7

    async def test_calendar_counts_include_reminders(self, client, task):
        await run_session(client, task["id"])

        response = await client.get(
            "/api/calendar/counts", params={"start": "2024-03-11", "end": "2024-03-17"}
        )

        assert response.json()["counts"] == {"2024-03-14": 1, "2024-03-16": 1}

    async def test_invalid_month(self, client):
        assert (await client.get("/api/calendar/month/2024/13")).status_code == 422

    async def test_last_supported_month(self, client):
        response = await client.get("/api/calendar/month/9999/12")

        assert response.status_code == 200
        assert response.json()["end"] == "9999-12-31"

    async def test_overlong_range_is_rejected(self, client):
        response = await client.get(
            "/api/calendar/counts", params={"start": "2024-01-01", "end": "2026-01-01"}
        )

        assert response.status_code == 422


class TestSettings:
    async def test_patch_settings(self, client):
        response = await client.patch("/api/settings", json={"work_duration_minutes": 50})

        assert response.json()["work_duration_minutes"] == 50
        assert (await client.get("/api/settings")).json()["work_duration_minutes"] == 50

    async def test_unknown_field_rejected(self, client):
        response = await client.patch("/api/settings", json={"work_minutes": 50})

        assert response.status_code == 422

    async def test_auto_loop_needs_premium(self, client):
        response = await client.patch("/api/settings", json={"auto_loop_enabled": True})
        body = response.json()

        assert response.status_code == 402
        assert body["error"] == "premium_required"
        assert body["details"]["feature"] == "auto_loop"
        assert body["error_id"]

    async def test_review_count_above_free_limit_needs_premium(self, client):
        response = await client.post("/api/tasks", json={"name": "Drill", "review_count": 4})

        assert response.status_code == 402

    async def test_trial_unlocks_premium_once(self, client):
        trial = await client.post("/api/settings/subscription/trial")
        again = await client.post("/api/settings/subscription/trial")
        options = (await client.get("/api/settings/review-options")).json()

        assert trial.json()["is_premium"] is True
        assert again.status_code == 422
        assert options["intervals"] == [1, 3, 7, 14, 30, 60]

    async def test_paid_subscription(self, client):
        expires = (datetime.now() + timedelta(days=30)).isoformat()

        response = await client.put(
            "/api/settings/subscription", json={"type": "monthly", "expires_at": expires}
        )

        assert response.json()["is_premium"] is True

    async def test_allowed_apps(self, client):
        await client.put("/api/settings/allowed-apps", json={"packages": ["a.b", "a.b", "c.d"]})

        assert (await client.get("/api/settings/allowed-apps")).json() == ["a.b", "c.d"]


class TestErrors:
    async def test_not_found_body(self, client):
        response = await client.get("/api/tasks/999")
        body = response.json()

        assert response.status_code == 404
        assert body["error"] == "not_found"
        assert body["details"]["kind"] == "not_found"
        assert body["error_id"]
        assert body["timestamp"]

    async def test_schedule_error_names_field(self, client):
        response = await client.post("/api/tasks", json={"name": "Drill", "schedule_type": "repeat"})

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "repeat_days"


class TestApiKey:
    @pytest.fixture(autouse=True)
    def require_key(self, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "secret")

    async def test_missing_key_is_401(self, client):
        response = await client.get("/api/tasks")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    async def test_wrong_key_is_403(self, client):
        response = await client.get("/api/tasks", headers={"X-API-Key": "nope"})

        assert response.status_code == 403

    async def test_valid_key(self, client):
        response = await client.get("/api/tasks", headers={"X-API-Key": "secret"})

        assert response.status_code == 200

    async def test_key_only_accepted_in_x_api_key_header(self, client):
        response = await client.get("/api/tasks", headers={"api_key": "secret"})

        assert response.status_code == 401

    async def test_health_is_open(self, client):
        assert (await client.get("/api/health")).status_code == 200
