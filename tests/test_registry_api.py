from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import API, assign, create_consultant, create_role, create_task


def test_role_crud_and_rate_validation(client: TestClient) -> None:
    role = create_role(client, name="Consultant Level 1", rate="50")
    assert role["rate_per_hour"] == "50.00"

    fetched = client.get(f"{API}/roles/{role['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == role

    updated = client.put(
        f"{API}/roles/{role['id']}",
        json={"name": "Consultant Level 2", "rate_per_hour": "75.00"},
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Consultant Level 2"
    assert updated.json()["rate_per_hour"] == "75.00"

    listed = client.get(f"{API}/roles")
    assert [item["id"] for item in listed.json()["items"]] == [role["id"]]

    for bad_rate in ("0", "-10.00", "12.345"):
        rejected = client.post(f"{API}/roles", json={"name": "Bad", "rate_per_hour": bad_rate})
        assert rejected.status_code == 400
        assert rejected.json()["error"] == "invalid_argument"

    bad_update = client.put(f"{API}/roles/{role['id']}", json={"name": "Bad", "rate_per_hour": "0"})
    assert bad_update.status_code == 400
    assert client.get(f"{API}/roles/{role['id']}").json()["rate_per_hour"] == "75.00"

    missing = client.get(f"{API}/roles/9999")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Role not found.", "error": "not_found"}


def test_role_delete_is_restricted_while_referenced(client: TestClient) -> None:
    role = create_role(client)
    consultant = create_consultant(client, role_id=role["id"])

    blocked = client.delete(f"{API}/roles/{role['id']}")
    assert blocked.status_code == 409
    assert blocked.json()["error"] == "conflict"

    assert client.delete(f"{API}/consultants/{consultant['id']}").status_code == 204
    assert client.delete(f"{API}/roles/{role['id']}").status_code == 204
    assert client.get(f"{API}/roles/{role['id']}").status_code == 404


def test_consultant_crud_reports_current_role_rate(client: TestClient) -> None:
    junior = create_role(client, name="Junior", rate="50.00")
    senior = create_role(client, name="Senior", rate="90.00")

    missing_role = client.post(
        f"{API}/consultants",
        json={"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.test", "role_id": 9999},
    )
    assert missing_role.status_code == 404

    consultant = create_consultant(client, role_id=junior["id"])
    assert consultant["role_name"] == "Junior"
    assert consultant["current_rate_per_hour"] == "50.00"

    replaced = client.put(
        f"{API}/consultants/{consultant['id']}",
        json={
            "first_name": "Grace",
            "last_name": "Hopper",
            "email": "grace@example.test",
            "role_id": senior["id"],
        },
    )
    assert replaced.status_code == 200
    body = replaced.json()
    assert (body["first_name"], body["last_name"], body["email"]) == ("Grace", "Hopper", "grace@example.test")
    assert body["role_id"] == senior["id"]
    assert body["current_rate_per_hour"] == "90.00"

    partial = client.put(f"{API}/consultants/{consultant['id']}", json={"first_name": "Only"})
    assert partial.status_code == 422

    listed = client.get(f"{API}/consultants")
    assert [item["role_name"] for item in listed.json()["items"]] == ["Senior"]

    assert client.get(f"{API}/consultants/9999").status_code == 404


def test_assignment_rules(client: TestClient) -> None:
    role = create_role(client)
    consultant = create_consultant(client, role_id=role["id"])
    task = create_task(client)

    unknown_consultant = client.post(f"{API}/tasks/{task['id']}/assign", json={"consultant_id": 9999})
    assert unknown_consultant.status_code == 404
    unknown_task = client.post(f"{API}/tasks/9999/assign", json={"consultant_id": consultant["id"]})
    assert unknown_task.status_code == 404

    assign(client, consultant_id=consultant["id"], task_id=task["id"])
    assert client.get(f"{API}/tasks/{task['id']}").json()["assigned_consultant_ids"] == [consultant["id"]]

    duplicate = client.post(f"{API}/tasks/{task['id']}/assign", json={"consultant_id": consultant["id"]})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Consultant already assigned to this task."

    assert client.delete(f"{API}/tasks/{task['id']}/unassign/{consultant['id']}").status_code == 204
    assert client.get(f"{API}/tasks/{task['id']}").json()["assigned_consultant_ids"] == []

    again = client.delete(f"{API}/tasks/{task['id']}/unassign/{consultant['id']}")
    assert again.status_code == 404
    assert again.json()["error"] == "not_found"


def test_task_create_and_list(client: TestClient) -> None:
    first = create_task(client, name="Discovery", duration_hours="40")
    second = create_task(client, name="Delivery", duration_hours="0")
    assert first["duration_hours"] == "40.00"
    assert first["description"] == "Client workshop"

    negative = client.post(f"{API}/tasks", json={"name": "Broken", "duration_hours": "-1"})
    assert negative.status_code == 400
    assert negative.json()["error"] == "invalid_argument"

    listed = client.get(f"{API}/tasks").json()["items"]
    assert [item["id"] for item in listed] == [first["id"], second["id"]]
    assert all(item["assigned_consultant_ids"] == [] for item in listed)


def test_deleting_consultant_or_task_cascades_to_history(client: TestClient) -> None:
    role = create_role(client)
    consultant = create_consultant(client, role_id=role["id"])
    other = create_consultant(client, role_id=role["id"], first_name="Alan", email="alan@example.test")
    task = create_task(client, name="Discovery")
    spare_task = create_task(client, name="Support")
    for consultant_id in (consultant["id"], other["id"]):
        for task_id in (task["id"], spare_task["id"]):
            assign(client, consultant_id=consultant_id, task_id=task_id)
            recorded = client.post(
                f"{API}/work-entries",
                json={
                    "consultant_id": consultant_id,
                    "task_id": task_id,
                    "work_date": "2025-01-01",
                    "hours_worked": "2",
                },
            )
            assert recorded.status_code == 201

    assert client.delete(f"{API}/consultants/{consultant['id']}").status_code == 204
    remaining = client.get(f"{API}/work-entries").json()["items"]
    assert {item["consultant_id"] for item in remaining} == {other["id"]}
    assert client.get(f"{API}/tasks/{task['id']}").json()["assigned_consultant_ids"] == [other["id"]]

    assert client.delete(f"{API}/tasks/{task['id']}").status_code == 204
    remaining = client.get(f"{API}/work-entries").json()["items"]
    assert [item["task_id"] for item in remaining] == [spare_task["id"]]
    assert client.get(f"{API}/tasks/{task['id']}").status_code == 404


def test_oversized_amounts_are_rejected_as_invalid(client: TestClient) -> None:
    for rate in ("1e30", "10000000000.00"):
        rejected = client.post(f"{API}/roles", json={"name": "Huge", "rate_per_hour": rate})
        assert rejected.status_code == 400
        assert rejected.json() == {"detail": "rate_per_hour is too large.", "error": "invalid_argument"}

    role = create_role(client)
    oversized_update = client.put(f"{API}/roles/{role['id']}", json={"name": "Huge", "rate_per_hour": "1e30"})
    assert oversized_update.status_code == 400
    assert client.get(f"{API}/roles/{role['id']}").json() == role

    duration = client.post(f"{API}/tasks", json={"name": "Endless", "duration_hours": "1e30"})
    assert duration.status_code == 400
    assert duration.json()["error"] == "invalid_argument"

    fractional = client.post(f"{API}/tasks", json={"name": "Odd", "duration_hours": "1.005"})
    assert fractional.status_code == 400
    assert client.get(f"{API}/tasks").json()["items"] == []


def test_blank_names_are_rejected_after_trimming(client: TestClient) -> None:
    blank_role = client.post(f"{API}/roles", json={"name": "   ", "rate_per_hour": "50.00"})
    assert blank_role.status_code == 400
    assert blank_role.json() == {"detail": "name must not be blank.", "error": "invalid_argument"}

    role = create_role(client, name="  Senior  ")
    assert role["name"] == "Senior"

    renamed = client.put(f"{API}/roles/{role['id']}", json={"name": " \t ", "rate_per_hour": "75.00"})
    assert renamed.status_code == 400
    assert client.get(f"{API}/roles/{role['id']}").json()["rate_per_hour"] == "50.00"

    blank_consultant = client.post(
        f"{API}/consultants",
        json={"first_name": "  ", "last_name": "Lovelace", "email": "ada@example.test", "role_id": role["id"]},
    )
    assert blank_consultant.status_code == 400
    assert blank_consultant.json()["detail"] == "first_name must not be blank."

    consultant = create_consultant(client, role_id=role["id"])
    blank_update = client.put(
        f"{API}/consultants/{consultant['id']}",
        json={"first_name": "Grace", "last_name": "   ", "email": "ada@example.test", "role_id": role["id"]},
    )
    assert blank_update.status_code == 400
    assert client.get(f"{API}/consultants/{consultant['id']}").json()["first_name"] == "Ada"

    blank_task = client.post(f"{API}/tasks", json={"name": "  ", "duration_hours": "1"})
    assert blank_task.status_code == 400
    assert client.get(f"{API}/tasks").json()["items"] == []
