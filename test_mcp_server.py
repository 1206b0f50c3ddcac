"""Tests for the MCP tools (fakeredis handoff, in-memory job table)."""

import asyncio

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import database
import mcp_server
from reminder_job import REMINDER_JOB_NAME
from scheduler import JobScheduler
from schemas import FlowResponse, FormDefinition


class UnreachableRedis:
    async def hset(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def aclose(self):
        pass


@pytest.fixture
def redis_server(monkeypatch, session_factory):
    """Route the tools' Redis clients to one fake server and jobs to SQLite."""
    server = fakeredis.FakeServer()
    monkeypatch.setattr(
        mcp_server.redis,
        "from_url",
        lambda url, **kwargs: fakeredis.FakeAsyncRedis(server=server, decode_responses=True)
    )
    monkeypatch.setattr(database, "SessionLocal", session_factory)
    return server


def test_format_flow_response():
    form = FormDefinition(title="Is this correct?", description="I will remind you at noon")
    assert mcp_server.format_flow_response(FlowResponse(form=form)) == (
        "Is this correct?\nI will remind you at noon\nCall confirm_reminder to confirm."
    )
    assert mcp_server.format_flow_response(FlowResponse(toast="Done")) == "Done"
    assert mcp_server.format_flow_response(FlowResponse()) == "Nothing to do."


def test_remind_me_then_confirm(redis_server, session_factory):
    prompt = asyncio.run(mcp_server.remind_me("t2_alice", "t3_x", "in one hour"))
    assert prompt.startswith("Is this correct?\nI will remind you at ")
    assert prompt.endswith("GMT\nCall confirm_reminder to confirm.")

    outcome = asyncio.run(mcp_server.confirm_reminder("t2_alice", "t3_x"))
    assert outcome.startswith("Gotcha! I'll send you a message about this post at ")
    assert JobScheduler(session_factory).pending_count(REMINDER_JOB_NAME) == 1

    again = asyncio.run(mcp_server.confirm_reminder("t2_alice", "t3_x"))
    assert again == "An error occurred while setting the reminder"


def test_unparseable_time(redis_server):
    assert asyncio.run(mcp_server.remind_me("t2_alice", "t3_x", "asdkjhasd")) == "I couldn't quite get that!"


def test_cancel_discards_pending_reminder(redis_server, session_factory):
    asyncio.run(mcp_server.remind_me("t2_alice", "t3_x", "in one hour"))

    assert asyncio.run(mcp_server.confirm_reminder("t2_alice", "t3_x", confirm=False)) == "Reminder cancelled."
    assert asyncio.run(mcp_server.confirm_reminder("t2_alice", "t3_x")) == (
        "An error occurred while setting the reminder"
    )
    assert JobScheduler(session_factory).pending_count() == 0


def test_redis_outage_is_reported_as_text(monkeypatch):
    monkeypatch.setattr(mcp_server.redis, "from_url", lambda url, **kwargs: UnreachableRedis())

    result = asyncio.run(mcp_server.remind_me("t2_alice", "t3_x", "in one hour"))
    assert result == "✗ Error starting reminder: Connection refused"
