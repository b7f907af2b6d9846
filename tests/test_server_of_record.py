import pytest
from fastapi.testclient import TestClient

from leadconsole.server.main import create_app

WRITABLE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "status_id",
    "source_id",
    "assigned_to_user_id",
    "budget_band",
    "insurance",
    "zip",
    "notes",
    "score",
    "is_active",
)


@pytest.fixture
def client():
    return TestClient(create_app("sqlite://"))


def create_lead(client: TestClient, payload: dict, actor: int | None = None):
    headers = {"X-Actor-User-Id": str(actor)} if actor is not None else {}
    return client.post("/api/v1/lead/", json=payload, headers=headers)


def writable(lead: dict) -> dict:
    return {key: lead[key] for key in WRITABLE_FIELDS}


def get_timeline(client: TestClient, lead_id: int):
    return client.get(f"/api/v1/lead/{lead_id}/timeline", params={"offset": 0, "limit": 50})


def test_lookup_lists_are_seeded(client):
    statuses = client.get("/api/v1/leadstatus/").json()
    users = client.get("/api/v1/user/").json()
    sources = client.get("/api/v1/leadsource/").json()
    assert [s["name"] for s in statuses][:2] == ["New", "Contacted"]
    assert users[0]["full_name"] == "Ann Admin"
    assert any(s["name"] == "Website" for s in sources)


def test_get_lead_embeds_relationship_objects(client):
    lead = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1, "source_id": 1}).json()
    response = client.get(f"/api/v1/lead/{lead['id']}")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == {"id": 1, "name": "New"}
    assert data["source"] == {"id": 1, "name": "Website"}
    assert data["created_at"]


def test_put_requires_full_representation(client):
    lead = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1}).json()
    partial = client.put(f"/api/v1/lead/{lead['id']}", json={"status_id": 2})
    assert partial.status_code == 422
    with_computed = client.put(f"/api/v1/lead/{lead['id']}", json=dict(writable(lead), status={"id": 1}))
    assert with_computed.status_code == 422
    full = client.put(f"/api/v1/lead/{lead['id']}", json=dict(writable(lead), status_id=2))
    assert full.status_code == 200
    assert full.json()["status"]["name"] == "Contacted"


def test_put_rejects_unknown_references(client):
    lead = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1}).json()
    response = client.put(f"/api/v1/lead/{lead['id']}", json=dict(writable(lead), assigned_to_user_id=404))
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "assigned_to_user_id"]


def test_status_change_is_logged_by_both_producers(client):
    lead = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1}, actor=2).json()
    client.put(f"/api/v1/lead/{lead['id']}", json=dict(writable(lead), status_id=2), headers={"X-Actor-User-Id": "2"})
    records = get_timeline(client, lead["id"]).json()["records"]
    assert records[-1]["kind"] == "LEAD_CREATED"
    envelope, status_record = records[0], records[1]
    assert (status_record["kind"], status_record["from"], status_record["to"], status_record["by"]) == ("status", 1, 2, 2)
    assert (envelope["kind"], envelope["type"]) == ("event", "STATUS_CHANGED")
    assert envelope["payload"] == {"from_status_id": 1, "to_status_id": 2}
    assert status_record["ts"] == envelope["ts"]
    assert "from" not in envelope


def test_field_change_carries_names_for_foreign_keys(client):
    lead = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1, "source_id": 1}).json()
    client.put(f"/api/v1/lead/{lead['id']}", json=dict(writable(lead), source_id=2, zip="10001"))
    records = get_timeline(client, lead["id"]).json()["records"]
    fields = {r["payload"]["field"]: r["payload"] for r in records if r.get("kind") == "field"}
    assert fields["source_id"]["old_name"] == "Website"
    assert fields["source_id"]["new_name"] == "Referral"
    assert fields["zip"] == {"field": "zip", "old": None, "new": "10001"}


def test_soft_delete_hides_lead_until_restored(client):
    lead_id = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1}).json()["id"]
    assert client.post("/api/v1/lead/soft-delete", json=[lead_id, 999]).json()["updated"] == 1
    assert client.get(f"/api/v1/lead/{lead_id}").status_code == 404
    assert client.post("/api/v1/lead/restore", json=[lead_id]).json()["ids"] == [lead_id]
    assert client.get(f"/api/v1/lead/{lead_id}").status_code == 200


def test_note_creation_logs_activity(client):
    lead_id = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1}).json()["id"]
    response = client.post("/api/v1/leadnote/", json={"body": "Call back Friday", "is_pinned": False, "lead_id": lead_id, "user_id": 1})
    assert response.status_code == 200
    assert response.json()["body"] == "Call back Friday"
    records = get_timeline(client, lead_id).json()["records"]
    assert records[0]["type"] == "NOTE_ADDED"
    assert records[0]["actor_user_id"] == 1


def test_timeline_for_missing_lead_is_404(client):
    assert get_timeline(client, 12345).status_code == 404


def test_timeline_page_starts_with_latest_events(client):
    lead = create_lead(client, {"first_name": "Pat", "last_name": "Lee", "status_id": 1}).json()
    for index in range(60):
        lead = client.put(f"/api/v1/lead/{lead['id']}", json=dict(writable(lead), zip=f"{index:05d}")).json()
    page = get_timeline(client, lead["id"]).json()
    assert page["total_count"] == 61
    assert len(page["records"]) == 50
    assert page["records"][0]["payload"]["new"] == "00059"
    assert all(record.get("kind") != "LEAD_CREATED" for record in page["records"])
