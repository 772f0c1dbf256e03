"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

import pytest
from datetime import date

from taskdeck.models.task import TaskStatus
from taskdeck.models.task_factory import create_task_base


def _create_template(test_client, **overrides):
    payload = {"title": "Water plants", "recurrence_rule": "daily", **overrides}
    response = test_client.post("/recurring-tasks", json=payload)
    assert response.status_code == 201
    return response.json()["template"]


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRecurringTaskEndpoints:
    """Recurring template CRUD."""

    def test_create_recurring_task(self, test_client):
        response = test_client.post(
            "/recurring-tasks",
            json={"title": "Team sync notes", "recurrence_rule": "Weekly-Monday", "priority": "urgent"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["recurrence_label"] == "every Monday"
        template = data["template"]
        assert template["title"] == "Team sync notes"
        assert template["recurrence_rule"] == "weekly-monday"
        assert template["priority"] == "urgent"
        assert template["is_paused"] is False
        assert template["status"] == "today"

    @pytest.mark.parametrize("rule", ["hourly", "weekly-funday", "monthly-32", "monthly-0", "daily-x", ""])
    def test_create_with_malformed_rule_is_rejected(self, test_client, rule):
        response = test_client.post("/recurring-tasks", json={"title": "Bad", "recurrence_rule": rule})

        assert response.status_code == 422

    def test_create_with_blank_title_is_rejected(self, test_client):
        response = test_client.post("/recurring-tasks", json={"title": "   ", "recurrence_rule": "daily"})

        assert response.status_code == 422

    def test_list_recurring_tasks(self, test_client):
        _create_template(test_client, title="One")
        _create_template(test_client, title="Two", recurrence_rule="monthly-last")

        response = test_client.get("/recurring-tasks")

        assert response.status_code == 200
        templates = response.json()["templates"]
        assert {t["template"]["title"] for t in templates} == {"One", "Two"}
        labels = {t["template"]["title"]: t["recurrence_label"] for t in templates}
        assert labels["Two"] == "last day of each month"

    def test_get_recurring_task(self, test_client):
        template = _create_template(test_client, recurrence_rule="monthly-15")

        response = test_client.get(f"/recurring-tasks/{template['id']}")

        assert response.status_code == 200
        assert response.json()["recurrence_label"] == "15th of each month"

    def test_get_missing_recurring_task(self, test_client):
        assert test_client.get("/recurring-tasks/missing").status_code == 404

    def test_update_recurring_task(self, test_client):
        template = _create_template(test_client, description="Old")

        response = test_client.patch(
            f"/recurring-tasks/{template['id']}",
            json={"recurrence_rule": "monthly-1", "description": None},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["template"]["recurrence_rule"] == "monthly-1"
        assert data["template"]["description"] is None
        assert data["template"]["title"] == "Water plants"
        assert data["recurrence_label"] == "1st of each month"

    def test_update_with_malformed_rule_is_rejected(self, test_client):
        template = _create_template(test_client)

        response = test_client.patch(f"/recurring-tasks/{template['id']}", json={"recurrence_rule": "weekly-"})

        assert response.status_code == 422

    def test_update_missing_recurring_task(self, test_client):
        assert test_client.patch("/recurring-tasks/missing", json={"title": "x"}).status_code == 404

    def test_pause_and_resume(self, test_client):
        template = _create_template(test_client)

        paused = test_client.post(f"/recurring-tasks/{template['id']}/pause")
        assert paused.status_code == 200
        assert paused.json()["template"]["is_paused"] is True

        resumed = test_client.post(f"/recurring-tasks/{template['id']}/resume")
        assert resumed.status_code == 200
        assert resumed.json()["template"]["is_paused"] is False

    def test_pause_missing_recurring_task(self, test_client):
        assert test_client.post("/recurring-tasks/missing/pause").status_code == 404


class TestGenerateInstances:
    """POST /recurring-tasks/generate is safe to call on every page load."""

    def test_without_token_creates_nothing(self, test_client):
        _create_template(test_client)

        response = test_client.post("/recurring-tasks/generate")

        assert response.status_code == 200
        data = response.json()
        assert data["created_count"] == 0
        assert data["today"] is None
        assert test_client.get("/tasks").json()["tasks"] == []

    def test_with_invalid_token_creates_nothing(self, test_client):
        _create_template(test_client)

        response = test_client.post("/recurring-tasks/generate", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 200
        assert response.json()["created_count"] == 0

    def test_with_token_creates_instances_once(self, test_client, auth_headers, monkeypatch):
        monkeypatch.delenv("RECURRENCE_ENGINE_MODE", raising=False)
        template = _create_template(test_client)

        first = test_client.post("/recurring-tasks/generate", headers=auth_headers)
        second = test_client.post("/recurring-tasks/generate", headers=auth_headers)

        assert first.status_code == 200
        assert first.json()["created_count"] == 1
        assert first.json()["today"] == date.today().isoformat()
        assert second.json()["created_count"] == 0

        instances = test_client.get(f"/recurring-tasks/{template['id']}/instances").json()["tasks"]
        assert len(instances) == 1
        assert instances[0]["status"] == "today"
        assert instances[0]["due_date"] == date.today().isoformat()

    def test_paused_template_is_not_expanded(self, test_client, auth_headers):
        template = _create_template(test_client)
        test_client.post(f"/recurring-tasks/{template['id']}/pause")

        response = test_client.post("/recurring-tasks/generate", headers=auth_headers)

        assert response.json()["created_count"] == 0


class TestDeleteRecurringTask:
    def _template_with_instance(self, test_client, auth_headers):
        template = _create_template(test_client)
        test_client.post("/recurring-tasks/generate", headers=auth_headers)
        return template

    def test_delete_orphans_instances_by_default(self, test_client, auth_headers, monkeypatch):
        monkeypatch.delenv("TEMPLATE_DELETE_POLICY", raising=False)
        template = self._template_with_instance(test_client, auth_headers)

        response = test_client.delete(f"/recurring-tasks/{template['id']}")

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "instances_deleted": 0, "instances_orphaned": 1}
        tasks = test_client.get("/tasks").json()["tasks"]
        assert len(tasks) == 1
        assert tasks[0]["parent_task_id"] is None
        assert test_client.get(f"/recurring-tasks/{template['id']}").status_code == 404

    def test_delete_reports_configured_cascade_policy(self, test_client, auth_headers, monkeypatch):
        monkeypatch.setenv("TEMPLATE_DELETE_POLICY", "cascade")
        template = self._template_with_instance(test_client, auth_headers)

        response = test_client.delete(f"/recurring-tasks/{template['id']}")

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "instances_deleted": 1, "instances_orphaned": 0}
        assert test_client.get("/tasks").json()["tasks"] == []

    def test_delete_with_instances(self, test_client, auth_headers):
        template = self._template_with_instance(test_client, auth_headers)

        response = test_client.delete(f"/recurring-tasks/{template['id']}", params={"delete_instances": "true"})

        assert response.status_code == 200
        assert response.json()["instances_deleted"] == 1
        assert test_client.get("/tasks").json()["tasks"] == []

    def test_delete_missing_recurring_task(self, test_client):
        assert test_client.delete("/recurring-tasks/missing").status_code == 404

    def test_instances_of_missing_template(self, test_client):
        assert test_client.get("/recurring-tasks/missing/instances").status_code == 404


class TestTaskEndpoints:
    """Bucket listing, completion and moves."""

    @pytest.fixture
    def stored_task(self, task_repo, test_user_id):
        return task_repo.create(create_task_base(user_id=test_user_id, title="Call accountant"))

    def test_list_tasks_by_status(self, test_client, task_repo, test_user_id, stored_task):
        task_repo.create(create_task_base(user_id=test_user_id, title="Today thing", status=TaskStatus.TODAY))

        all_tasks = test_client.get("/tasks").json()["tasks"]
        today = test_client.get("/tasks", params={"status": "today"}).json()["tasks"]

        assert len(all_tasks) == 2
        assert [t["title"] for t in today] == ["Today thing"]

    def test_create_task(self, test_client):
        response = test_client.post(
            "/tasks",
            json={"title": "  Send invoice ", "category": "client", "due_date": "2024-03-15"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Send invoice"
        assert data["status"] == "inbox"
        assert data["due_date"] == "2024-03-15"
        assert data["parent_task_id"] is None
        assert [t["id"] for t in test_client.get("/tasks").json()["tasks"]] == [data["id"]]

    def test_create_task_with_blank_title_is_rejected(self, test_client):
        assert test_client.post("/tasks", json={"title": "  "}).status_code == 422

    def test_delete_task(self, test_client, stored_task):
        response = test_client.delete(f"/tasks/{stored_task.id}")

        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        assert test_client.get("/tasks").json()["tasks"] == []
        assert test_client.delete(f"/tasks/{stored_task.id}").status_code == 404

    def test_complete_task(self, test_client, stored_task):
        response = test_client.post(f"/tasks/{stored_task.id}/complete")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "done"
        assert data["completed_at"] is not None

    def test_move_task(self, test_client, stored_task):
        response = test_client.post(f"/tasks/{stored_task.id}/move", json={"status": "next_week"})

        assert response.status_code == 200
        assert response.json()["status"] == "next_week"

    def test_move_task_to_unknown_bucket(self, test_client, stored_task):
        response = test_client.post(f"/tasks/{stored_task.id}/move", json={"status": "someday"})

        assert response.status_code == 422

    def test_missing_task(self, test_client):
        assert test_client.post("/tasks/missing/complete").status_code == 404
        assert test_client.post("/tasks/missing/move", json={"status": "today"}).status_code == 404


class TestAuthentication:
    def test_endpoints_require_token_without_override(self, db_session):
        from fastapi.testclient import TestClient
        from taskdeck.api.app import app
        from taskdeck.database.database import get_db

        def override_get_db():
            yield db_session

        app.dependency_overrides[get_db] = override_get_db
        try:
            with TestClient(app) as client:
                assert client.get("/recurring-tasks").status_code == 401
                assert client.get("/tasks", headers={"Authorization": "Bearer garbage"}).status_code == 401
        finally:
            app.dependency_overrides.clear()
