"""
Global pytest configuration and fixtures for the board chat tests
"""

import asyncio
import os
import tempfile

# Must be set before boardroom is imported: settings are read once
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["COOKIE_SECURE"] = "false"
os.environ["TYPING_DELAY_MIN_SECONDS"] = "0"
os.environ["TYPING_DELAY_MAX_SECONDS"] = "0"
os.environ["WS_HEARTBEAT_SECONDS"] = "3600"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="boardroom-uploads-")
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from boardroom.config.database import Base, SessionLocal, engine
from boardroom.integrations.claude import (
    CompletionRequest,
    CompletionResult,
    get_completion_client,
)
from boardroom.main import app
from boardroom.models import Persona, User
from boardroom.services.personalities import PersonalityKind, resolve_system_prompt
from boardroom.services.token import create_user_token


class FakeCompletionClient:
    """Scripted completion client keyed by persona name.

    A script entry may be a reply string, an exception instance to raise,
    or a (delay_seconds, reply) tuple.
    """

    def __init__(self, scripts: dict = None, default: str = "Tell me more about that."):
        self.scripts = scripts or {}
        self.default = default
        self.requests: list[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        self.requests.append(request)
        script = self.scripts.get(request.persona_name, self.default)

        if isinstance(script, tuple):
            delay, script = script
            await asyncio.sleep(delay)
        if isinstance(script, Exception):
            raise script
        return CompletionResult(text=script, suggestions=[f"What did {request.persona_name} miss?"])


@pytest.fixture(autouse=True)
def schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(schema):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def completion_client():
    return FakeCompletionClient()


@pytest.fixture
def client(completion_client):
    app.dependency_overrides[get_completion_client] = lambda: completion_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, email: str, tier: str = "free", is_admin: bool = False) -> User:
    user = User(email=email, first_name="Test", last_name="User", subscription_tier=tier, is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_persona(db, owner: User, name: str, kind: PersonalityKind = PersonalityKind.WISE_MENTOR) -> Persona:
    persona = Persona(
        owner_id=owner.id,
        name=name,
        personality=kind.value,
        system_prompt=resolve_system_prompt(kind),
        is_active=True,
    )
    db.add(persona)
    db.commit()
    db.refresh(persona)
    return persona


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user.id, user.email)}"}


@pytest.fixture
def user(db):
    return make_user(db, "free@example.com")


@pytest.fixture
def premium_user(db):
    return make_user(db, "premium@example.com", tier="premium")


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@example.com", is_admin=True)


@pytest.fixture
def board(db, premium_user):
    """Three personas owned by the premium user."""
    return [
        make_persona(db, premium_user, "Maya", PersonalityKind.EMPATHETIC_COUNSELOR),
        make_persona(db, premium_user, "Marcus", PersonalityKind.MOTIVATIONAL_COACH),
        make_persona(db, premium_user, "Sage", PersonalityKind.WISE_MENTOR),
    ]


@pytest.fixture
def conversation(db, premium_user):
    from boardroom.services.conversation_store import ConversationStore

    return ConversationStore(db).create_conversation(premium_user.id, "Career questions")
