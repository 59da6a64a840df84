from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from lms.main import app
from lms.models.assessment import Question
from lms.models.catalog import Level, Module, SubTopic, SubTopicContent
from lms.models.principal import Principal
from lms.repos.bundle import Repos
from lms.repos.memory import memory_db
from lms.services import token_service

# Ensure repo root is on sys.path so `import lms` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_memory_db() -> None:
    """Clear the in-memory store between tests."""
    memory_db.clear()


@pytest.fixture(autouse=True)
def reset_dependency_overrides() -> None:
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def repos() -> Repos:
    return Repos.in_memory()


def mint_token(
    username: str = "learner-1",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with the default role (learner)."""
    return mint_token()


@pytest.fixture
def author_token() -> str:
    return mint_token(username="author-1", roles=["master_practitioner"])


@pytest.fixture
def admin_token() -> str:
    return mint_token(username="admin-1", roles=["admin"])


def learner(user_id: str = "learner-1") -> Principal:
    return Principal(user_id=user_id, roles=frozenset({"learner"}))


def author(user_id: str = "author-1") -> Principal:
    return Principal(user_id=user_id, roles=frozenset({"master_practitioner"}))


def at(minute: int) -> datetime:
    """A fixed UTC timestamp, ``minute`` minutes into the day."""
    return datetime(2026, 1, 1, 0, minute, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Seed helpers (write straight into the in-memory store)
# ---------------------------------------------------------------------------


def seed_module(title: str = "Foundations", *, is_active: bool = True) -> Module:
    module = Module.new(title=title, is_active=is_active)
    memory_db.modules[module.id] = module
    return module


def seed_level(module: Module, title: str = "Level 1", order_index: int = 0) -> Level:
    level = Level.new(module_id=module.id, title=title, order_index=order_index)
    memory_db.levels[level.id] = level
    return level


def seed_sub_topic(level: Level, title: str = "Breathing", order_index: int = 0) -> SubTopic:
    sub_topic = SubTopic.new(level_id=level.id, title=title, order_index=order_index)
    memory_db.sub_topics[sub_topic.id] = sub_topic
    return sub_topic


def seed_content(
    sub_topic: SubTopic,
    title: str = "Intro",
    *,
    order_index: int = 0,
    is_published: bool = True,
) -> SubTopicContent:
    content = SubTopicContent.new(
        sub_topic_id=sub_topic.id,
        title=title,
        order_index=order_index,
        is_published=is_published,
    )
    memory_db.contents[content.id] = content
    return content


def seed_question(
    text: str = "Which one?",
    letters: str = "CAB",
    *,
    correct: str = "A",
    is_active: bool = True,
) -> Question:
    question = Question.new(
        question=text,
        options=[(letter, f"option {letter}", letter == correct) for letter in letters],
        is_active=is_active,
    )
    memory_db.questions[question.id] = question
    return question
