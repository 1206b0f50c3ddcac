"""Shared test fixtures: in-memory job database and a fake platform."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database


class FakePlatform:
    """In-memory lookup service and message channel."""

    def __init__(self, users=None, posts=None, deliver=True):
        self.users = users or {}
        self.posts = posts or {}
        self.deliver = deliver
        self.sent = []

    async def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    async def get_post_by_id(self, post_id):
        return self.posts.get(post_id)

    async def send_private_message(self, message):
        self.sent.append(message)
        return self.deliver


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    database.init_db(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
