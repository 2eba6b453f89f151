"""
API endpoint tests for all routes.
Uses in-memory SQLite + dependency-overridden FastAPI test client.
"""
from sqlalchemy import select, func

from backend.models.audit import AuditLogRecord
from backend.models.task import TaskRecord


# ===================== HEALTH / ROOT =====================


async def test_root(client):
    r = await client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"


async def test_health(unauth_client):
    r = await unauth_client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["uptime"] >= 0
    assert "timestamp" in body


# ===================== AUTH =====================


async def test_login_success(unauth_client, seed_data):
    r = await unauth_client.post(
        "/api/auth/login",
        data={"username": "test@example.com", "password": "testpass123"},
    )
    assert r.status_code == 200
    assert "access_token" in r.json()


async def test_login_records_auth_entry(unauth_client, db_session, seed_data):
    await unauth_client.post(
        "/api/auth/login",
        data={"username": "test@example.com", "password": "testpass123"},
    )
    result = await db_session.execute(
        select(AuditLogRecord).where(AuditLogRecord.user_id == seed_data["user"].id)
    )
    actions = [e.action for e in result.scalars().all()]
    assert actions == ["AUTH"]


async def test_login_wrong_password(unauth_client, seed_data):
    r = await unauth_client.post(
        "/api/auth/login",
        data={"username": "test@example.com", "password": "wrong"},
    )
    assert r.status_code == 401


async def test_login_unknown_email_same_message(unauth_client, seed_data):
    wrong_password = await unauth_client.post(
        "/api/auth/login",
        data={"username": "test@example.com", "password": "wrong"},
    )
    unknown_user = await unauth_client.post(
        "/api/auth/login",
        data={"username": "nobody@example.com", "password": "wrong"},
    )
    assert unknown_user.status_code == 401
    assert unknown_user.json() == wrong_password.json()


async def test_register_new_user(unauth_client, seed_data):
    r = await unauth_client.post(
        "/api/auth/register",
        json={"email": "New@Example.com", "full_name": "New User", "password": "pass123"},
    )
    assert r.status_code == 200
    assert r.json()["email"] == "new@example.com"


async def test_register_duplicate_email(unauth_client, seed_data):
    r = await unauth_client.post(
        "/api/auth/register",
        json={"email": "test@example.com", "full_name": "Dup", "password": "pass123"},
    )
    assert r.status_code == 400


async def test_get_me(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 200
    assert r.json()["email"] == "test@example.com"


async def test_protected_route_no_token(unauth_client, seed_data):
    r = await unauth_client.get("/api/tasks")
    assert r.status_code == 401


async def test_logout_records_session_clear(client):
    r = await client.post("/api/auth/logout")
    assert r.status_code == 200

    r = await client.get("/api/audit")
    assert r.json()[0]["action"] == "SESSION_CLEAR"


# ===================== TASKS =====================


async def test_create_task(client):
    r = await client.post("/api/tasks", json={"title": "Buy milk", "description": "2 liters"})
    assert r.status_code == 201
    body = r.json()
    assert body["title"] == "Buy milk"
    assert body["description"] == "2 liters"
    assert body["status"] == "PENDING"
    assert isinstance(body["createdAt"], int)
    assert body["id"]


async def test_create_task_without_description(client):
    r = await client.post("/api/tasks", json={"title": "Call mom"})
    assert r.status_code == 201
    assert r.json()["description"] == ""


async def test_create_task_empty_title(client):
    r = await client.post("/api/tasks", json={"title": "   "})
    assert r.status_code == 400
    assert "error" in r.json()

    r = await client.get("/api/tasks")
    assert r.json() == []


async def test_list_tasks_newest_first(client, db_session, seed_data):
    user_id = seed_data["user"].id
    db_session.add_all([
        TaskRecord(id="old", user_id=user_id, title="Old", created_at=1_000),
        TaskRecord(id="new", user_id=user_id, title="New", created_at=3_000),
        TaskRecord(id="mid", user_id=user_id, title="Mid", created_at=2_000),
    ])
    await db_session.commit()

    r = await client.get("/api/tasks")
    assert r.status_code == 200
    assert [t["id"] for t in r.json()] == ["new", "mid", "old"]


async def test_tasks_are_per_user(client, other_client):
    await client.post("/api/tasks", json={"title": "Mine"})

    r = await other_client.get("/api/tasks")
    assert r.json() == []


async def test_get_task_not_found(client):
    r = await client.get("/api/tasks/does-not-exist")
    assert r.status_code == 404


async def test_toggle_task_twice(client):
    created = (await client.post("/api/tasks", json={"title": "Flip"})).json()

    r = await client.patch(f"/api/tasks/{created['id']}/toggle")
    assert r.status_code == 200
    assert r.json()["status"] == "COMPLETED"

    r = await client.patch(f"/api/tasks/{created['id']}/toggle")
    assert r.json()["status"] == "PENDING"
    assert r.json()["createdAt"] == created["createdAt"]


async def test_toggle_unknown_task(client):
    r = await client.patch("/api/tasks/nope/toggle")
    assert r.status_code == 404
    assert r.json()["error"] == "Task not found"


async def test_toggle_other_users_task(client, other_client):
    created = (await client.post("/api/tasks", json={"title": "Private"})).json()
    r = await other_client.patch(f"/api/tasks/{created['id']}/toggle")
    assert r.status_code == 404


async def test_delete_task(client):
    created = (await client.post("/api/tasks", json={"title": "Temp"})).json()

    r = await client.delete(f"/api/tasks/{created['id']}")
    assert r.status_code == 200
    assert r.json() == {"success": True}

    r = await client.get("/api/tasks")
    assert r.json() == []


async def test_delete_unknown_task(client):
    r = await client.delete("/api/tasks/nope")
    assert r.status_code == 404


async def test_put_creates_task_with_client_id(client):
    r = await client.put("/api/tasks/client-id-1", json={
        "id": "client-id-1",
        "title": "From client",
        "description": "",
        "status": "COMPLETED",
        "createdAt": 1_700_000_000_000,
    })
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == "client-id-1"
    assert body["status"] == "COMPLETED"
    assert body["createdAt"] == 1_700_000_000_000


async def test_put_updates_title_and_keeps_status(client):
    created = (await client.post("/api/tasks", json={"title": "Draft"})).json()
    await client.patch(f"/api/tasks/{created['id']}/toggle")

    r = await client.put(f"/api/tasks/{created['id']}", json={"title": "Final", "description": "done"})
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Final"
    assert body["description"] == "done"
    assert body["status"] == "COMPLETED"
    assert body["createdAt"] == created["createdAt"]


async def test_put_empty_title(client):
    created = (await client.post("/api/tasks", json={"title": "Keep"})).json()
    r = await client.put(f"/api/tasks/{created['id']}", json={"title": ""})
    assert r.status_code == 400


async def test_put_id_owned_by_other_user(client, other_client):
    created = (await client.post("/api/tasks", json={"title": "Mine"})).json()
    r = await other_client.put(f"/api/tasks/{created['id']}", json={"title": "Theirs"})
    assert r.status_code == 409
    assert "already in use" in r.json()["error"]


async def test_create_task_without_title(client):
    r = await client.post("/api/tasks", json={"description": "no title"})
    assert r.status_code == 400
    assert r.json()["error"] == "Task title must not be empty"


async def test_put_without_title(client):
    r = await client.put("/api/tasks/untitled", json={"description": "x"})
    assert r.status_code == 400
    assert "error" in r.json()


async def test_clear_tasks(client, other_client, db_session):
    await client.post("/api/tasks", json={"title": "One"})
    await client.post("/api/tasks", json={"title": "Two"})
    await other_client.post("/api/tasks", json={"title": "Not mine"})

    r = await client.delete("/api/tasks")
    assert r.status_code == 200
    assert r.json() == {"success": True, "deleted": 2}

    count = await db_session.execute(select(func.count(TaskRecord.id)))
    assert count.scalar() == 1


async def test_import_replaces_everything(client):
    await client.post("/api/tasks", json={"title": "Existing"})

    r = await client.post("/api/tasks/import", json=[
        {"id": "a", "title": "Alpha", "status": "COMPLETED", "createdAt": 2_000},
        {"id": "b", "title": "Beta", "description": "second", "createdAt": 1_000},
    ])
    assert r.status_code == 200

    r = await client.get("/api/tasks")
    tasks = r.json()
    assert [t["id"] for t in tasks] == ["a", "b"]
    assert tasks[0]["status"] == "COMPLETED"
    assert tasks[1]["status"] == "PENDING"


async def test_import_same_ids_again(client):
    payload = [{"id": "x", "title": "X", "createdAt": 5}]
    await client.post("/api/tasks/import", json=payload)
    r = await client.post("/api/tasks/import", json=payload)
    assert r.status_code == 200
    assert [t["id"] for t in (await client.get("/api/tasks")).json()] == ["x"]


async def test_import_rejects_empty_title(client):
    await client.post("/api/tasks", json={"title": "Survivor"})
    r = await client.post("/api/tasks/import", json=[{"title": " "}])
    assert r.status_code == 400


async def test_import_rejects_duplicate_ids(client):
    r = await client.post("/api/tasks/import", json=[
        {"id": "dup", "title": "A"},
        {"id": "dup", "title": "B"},
    ])
    assert r.status_code == 400


# ===================== AUDIT =====================


async def test_append_and_list_audit(client, seed_data):
    r = await client.post("/api/audit", json={"action": "CREATE", "details": "Added task: A", "timestamp": 1})
    assert r.status_code == 201
    assert r.json()["userId"] == str(seed_data["user"].id)

    await client.post("/api/audit", json={"action": "TOGGLE", "details": "Toggled", "timestamp": 2})

    r = await client.get("/api/audit")
    assert [e["action"] for e in r.json()] == ["TOGGLE", "CREATE"]


async def test_append_audit_is_idempotent_by_id(client):
    entry = {"id": "entry-1", "action": "CLEAR", "details": "Cleared", "timestamp": 10}
    await client.post("/api/audit", json=entry)
    await client.post("/api/audit", json=entry)

    r = await client.get("/api/audit")
    assert len(r.json()) == 1


async def test_audit_bounded_to_fifty(client):
    for i in range(55):
        await client.post("/api/audit", json={"action": "CREATE", "details": f"#{i}", "timestamp": i + 1})

    r = await client.get("/api/audit")
    entries = r.json()
    assert len(entries) == 50
    assert entries[0]["details"] == "#54"
    assert entries[-1]["details"] == "#5"


async def test_audit_unknown_action(client):
    r = await client.post("/api/audit", json={"action": "EXPLODE", "details": ""})
    assert r.status_code == 422


async def test_delete_and_clear_audit(client):
    created = (await client.post("/api/audit", json={"action": "CREATE", "details": "x"})).json()
    await client.post("/api/audit", json={"action": "DELETE", "details": "y"})

    r = await client.delete(f"/api/audit/{created['id']}")
    assert r.status_code == 200
    assert len((await client.get("/api/audit")).json()) == 1

    r = await client.delete(f"/api/audit/{created['id']}")
    assert r.status_code == 404

    r = await client.delete("/api/audit")
    assert r.status_code == 200
    assert (await client.get("/api/audit")).json() == []
