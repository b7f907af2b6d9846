import httpx
import pytest

from leadconsole.api.client import LeadsApiClient
from leadconsole.core.errors import NotFoundError, TransportError
from leadconsole.schemas.lookup import LookupDirectory
from leadconsole.server.main import create_app
from leadconsole.services.notes import build_notes, load_notes, note_author


def test_note_author_prefers_embedded_user_then_author():
    assert note_author({"user": {"id": 1, "full_name": "Ann Admin"}}) == "Ann Admin"
    assert note_author({"user": {"id": 2, "first_name": "Bob", "last_name": "Baker"}}) == "Bob Baker"
    assert note_author({"author": {"id": 3, "username": "cy"}}) == "cy"
    assert note_author({"user": {"id": 4}, "author": {"email": "d@example.com"}}) == "d@example.com"


def test_note_author_falls_back_to_name_fields_then_id():
    assert note_author({"author_name": "Dee"}) == "Dee"
    assert note_author({"created_by_name": "Eve", "user_id": 9}) == "Eve"
    assert note_author({"user_name": "Fay"}) == "Fay"
    assert note_author({"user_id": 9}) == "User #9"
    assert note_author({"user_id": 9}, LookupDirectory(users={9: "Gus"})) == "Gus"
    assert note_author({}) == "Unknown User"


def test_build_notes_orders_newest_first_and_fills_blank_bodies():
    notes = [
        {"id": 1, "body": "first", "created_at": "2024-01-01T10:00:00Z"},
        {"id": 2, "body": "", "created_at": "2024-01-03T10:00:00"},
        {"id": 3, "body": "undated"},
        {"id": 4, "body": "second", "created_at": "2024-01-02T10:00:00+00:00"},
    ]
    entries = build_notes(notes)
    assert [entry.id for entry in entries] == [2, 4, 1, 3]
    assert entries[0].body == "No content"
    assert entries[-1].created_at is None
    assert entries[0].author == "Unknown User"


class FakeNotesClient:
    def __init__(self, notes, users=None, fail_users=False):
        self.notes = notes
        self.users = users or []
        self.fail_users = fail_users
        self.user_calls = 0

    async def list_notes(self, lead_id):
        return list(self.notes)

    async def list_users(self):
        self.user_calls += 1
        if self.fail_users:
            raise TransportError(500, "boom")
        return self.users


@pytest.mark.asyncio
async def test_load_notes_resolves_bare_user_ids_from_user_list():
    client = FakeNotesClient(
        [{"id": 1, "body": "hi", "user_id": 5, "created_at": "2024-01-01T00:00:00Z"}],
        users=[{"id": 5, "first_name": "Hal"}],
    )
    entries = await load_notes(client, 1)
    assert entries[0].author == "Hal"
    assert client.user_calls == 1


@pytest.mark.asyncio
async def test_load_notes_skips_user_list_when_authors_are_embedded():
    client = FakeNotesClient([{"id": 1, "body": "hi", "user_id": 5, "user": {"id": 5, "username": "hal"}}])
    entries = await load_notes(client, 1)
    assert entries[0].author == "hal"
    assert client.user_calls == 0


@pytest.mark.asyncio
async def test_load_notes_degrades_when_user_list_fails():
    client = FakeNotesClient([{"id": 1, "body": "hi", "user_id": 5}], fail_users=True)
    entries = await load_notes(client, 1)
    assert entries[0].author == "User #5"


@pytest.mark.asyncio
async def test_list_notes_calls_lead_notes_path():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": 1, "body": "hi", "lead_id": 7}])

    client = LeadsApiClient(base_url="http://api.test", transport=httpx.MockTransport(handler))
    async with client:
        notes = await client.list_notes(7)
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/v1/leadnote/lead/7"
    assert notes == [{"id": 1, "body": "hi", "lead_id": 7}]


@pytest.mark.asyncio
async def test_notes_tab_against_server_of_record():
    app = create_app("sqlite://")
    async with LeadsApiClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app)) as client:
        lead = await client.create_lead({"first_name": "Pat", "last_name": "Lee", "status_id": 1})
        await client.create_note(lead["id"], "Left a voicemail", user_id=2)
        await client.create_note(lead["id"], "Called back", user_id=3)
        await client.create_note(lead["id"], "Anonymous tip")

        entries = await load_notes(client, lead["id"])

        assert [entry.body for entry in entries] == ["Anonymous tip", "Called back", "Left a voicemail"]
        assert [entry.author for entry in entries] == ["Unknown User", "cy", "Bob Baker"]
        assert all(entry.created_at is not None for entry in entries)

        with pytest.raises(NotFoundError):
            await client.list_notes(999)
