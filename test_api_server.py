"""HTTP tests for the RemindMe API (fakeredis + in-memory SQLite)."""

import fakeredis
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

import api_server
from handoff_store import HandoffStore
from scheduler import JobScheduler

ALICE_ON_X = {"actor_id": "t2_alice", "target_id": "t3_x"}


@pytest.fixture
def client(session_factory):
    server = fakeredis.FakeServer()

    async def override_store():
        redis_client = fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
        try:
            yield HandoffStore(redis_client)
        finally:
            await redis_client.aclose()

    api_server.app.dependency_overrides[api_server.get_handoff_store] = override_store
    api_server.app.dependency_overrides[api_server.get_scheduler] = lambda: JobScheduler(session_factory)
    yield TestClient(api_server.app)
    api_server.app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_menu(client):
    body = client.get("/remind-me/menu").json()
    assert body["menu_item"] == {"label": "Remind me", "location": "post"}
    assert body["form"]["fields"][0]["placeholder"] == "e.g. In one hour, 2 days from now"


def test_full_flow(client):
    prompt = client.post("/remind-me/time", json={**ALICE_ON_X, "time": "in one hour"})
    assert prompt.status_code == 200
    assert prompt.json()["form"]["title"] == "Is this correct?"

    confirmed = client.post("/remind-me/confirm", json={**ALICE_ON_X, "confirmed": True})
    assert confirmed.status_code == 200
    assert confirmed.json()["toast"].startswith("Gotcha! I'll send you a message about this post at ")

    assert client.get("/jobs/pending/count").json()["pending"] == 1

    again = client.post("/remind-me/confirm", json=ALICE_ON_X)
    assert again.json()["toast"] == "An error occurred while setting the reminder"
    assert client.get("/jobs/pending/count").json()["pending"] == 1


def test_unparseable_time(client):
    response = client.post("/remind-me/time", json={**ALICE_ON_X, "time": "asdkjhasd"})
    assert response.status_code == 200
    assert response.json() == {"toast": "I couldn't quite get that!", "form": None}


def test_confirm_requires_login(client):
    client.post("/remind-me/time", json={**ALICE_ON_X, "time": "in one hour"})
    response = client.post("/remind-me/confirm", json={"target_id": "t3_x"})
    assert response.json()["toast"] == "I can only remind you if you're logged in"


def test_cancel(client):
    client.post("/remind-me/time", json={**ALICE_ON_X, "time": "in one hour"})

    cancelled = client.post("/remind-me/confirm", json={**ALICE_ON_X, "confirmed": False})
    assert cancelled.json() == {"toast": None, "form": None}

    confirmed = client.post("/remind-me/confirm", json=ALICE_ON_X)
    assert confirmed.json()["toast"] == "An error occurred while setting the reminder"
    assert client.get("/jobs/pending/count").json()["pending"] == 0


def test_time_is_required(client):
    response = client.post("/remind-me/time", json=ALICE_ON_X)
    assert response.status_code == 422


class UnreachableStore(HandoffStore):
    def __init__(self):
        super().__init__(client=None)

    async def put(self, context, request, ttl=None):
        raise RedisConnectionError("Connection refused")

    async def take_and_delete(self, context):
        raise RedisConnectionError("Connection refused")


class BrokenScheduler(JobScheduler):
    def run_job(self, name, data, run_at):
        raise OperationalError("INSERT INTO scheduled_jobs", {}, Exception("database is locked"))


def test_handoff_store_outage_is_503(client):
    api_server.app.dependency_overrides[api_server.get_handoff_store] = UnreachableStore

    time_input = client.post("/remind-me/time", json={**ALICE_ON_X, "time": "in one hour"})
    assert time_input.status_code == 503
    assert time_input.json()["detail"] == "Reminder storage is unavailable"

    confirmation = client.post("/remind-me/confirm", json=ALICE_ON_X)
    assert confirmation.status_code == 503


def test_job_database_failure_is_503(client, session_factory):
    api_server.app.dependency_overrides[api_server.get_scheduler] = lambda: BrokenScheduler(session_factory)

    client.post("/remind-me/time", json={**ALICE_ON_X, "time": "in one hour"})
    response = client.post("/remind-me/confirm", json=ALICE_ON_X)

    assert response.status_code == 503
    assert response.json()["detail"] == "Could not schedule the reminder"
