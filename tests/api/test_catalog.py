from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lms.models.assessment import Assessment
from lms.models.result import AssessmentResult
from lms.repos.memory import memory_db
from tests.conftest import (
    at,
    auth,
    seed_content,
    seed_level,
    seed_module,
    seed_sub_topic,
)


def test_list_modules_only_active_sorted(client: TestClient, token: str) -> None:
    seed_module("Zeta")
    seed_module("Alpha")
    seed_module("Hidden", is_active=False)

    resp = client.get("/modules", headers=auth(token))

    assert resp.status_code == 200
    assert [m["title"] for m in resp.json()] == ["Alpha", "Zeta"]


def test_module_detail_lists_levels_in_order(client: TestClient, token: str) -> None:
    module = seed_module()
    seed_level(module, "Second", order_index=1)
    seed_level(module, "First", order_index=0)

    resp = client.get(f"/modules/{module.id}", headers=auth(token))

    assert resp.status_code == 200
    assert [lv["title"] for lv in resp.json()["levels"]] == ["First", "Second"]


def test_module_not_found(client: TestClient, token: str) -> None:
    assert client.get("/modules/nope", headers=auth(token)).status_code == 404


def test_catalog_requires_auth(client: TestClient) -> None:
    assert client.get("/modules").status_code == 401


# ---- sub-topics ----


def test_list_sub_topics_with_published_content(client: TestClient, token: str) -> None:
    level = seed_level(seed_module())
    sub = seed_sub_topic(level, "Breathing")
    seed_content(sub, "Later", order_index=2)
    seed_content(sub, "Sooner", order_index=1)
    seed_content(sub, "Draft", is_published=False)

    resp = client.get("/sub-topics", params={"levelId": level.id}, headers=auth(token))

    assert resp.status_code == 200
    (item,) = resp.json()
    assert item["title"] == "Breathing"
    assert [c["title"] for c in item["contents"]] == ["Sooner", "Later"]


def test_create_sub_topic(client: TestClient, author_token: str) -> None:
    level = seed_level(seed_module())

    resp = client.post(
        "/sub-topics",
        json={"levelId": level.id, "title": "Posture", "estimatedDuration": 15},
        headers=auth(author_token),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["levelId"] == level.id
    assert body["estimatedDuration"] == 15
    assert body["isActive"] is True


def test_create_sub_topic_unknown_level(client: TestClient, author_token: str) -> None:
    resp = client.post(
        "/sub-topics",
        json={"levelId": "nope", "title": "Posture"},
        headers=auth(author_token),
    )
    assert resp.status_code == 404


def test_learner_cannot_create_sub_topic(client: TestClient, token: str) -> None:
    level = seed_level(seed_module())
    resp = client.post(
        "/sub-topics", json={"levelId": level.id, "title": "x"}, headers=auth(token)
    )
    assert resp.status_code == 403


def test_put_applies_only_supplied_fields(client: TestClient, author_token: str) -> None:
    sub = seed_sub_topic(seed_level(seed_module()), "Original")

    resp = client.put(
        f"/sub-topics/{sub.id}",
        json={"description": "new words", "title": None},
        headers=auth(author_token),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Original"
    assert body["description"] == "new words"
    assert body["orderIndex"] == 0


def test_put_unknown_sub_topic(client: TestClient, author_token: str) -> None:
    resp = client.put("/sub-topics/nope", json={"title": "x"}, headers=auth(author_token))
    assert resp.status_code == 404


def test_delete_sub_topic_cascades(client: TestClient, author_token: str, token: str) -> None:
    sub = seed_sub_topic(seed_level(seed_module()))
    content = seed_content(sub)

    resp = client.delete(f"/sub-topics/{sub.id}", headers=auth(author_token))

    assert resp.status_code == 204
    assert client.get(f"/sub-topics/{sub.id}", headers=auth(token)).status_code == 404
    assert content.id not in memory_db.contents


@pytest.mark.parametrize("method", ["POST", "PATCH"])
def test_sub_topic_item_rejects_other_methods(client: TestClient, method: str) -> None:
    resp = client.request(method, "/sub-topics/anything")
    assert resp.status_code == 405
    assert resp.headers["allow"] == "GET, PUT, DELETE"


# ---- levels / content ----


def test_delete_level_cascades_to_tests_and_results(
    client: TestClient, author_token: str
) -> None:
    module = seed_module()
    level = seed_level(module)
    sub = seed_sub_topic(level)
    test = Assessment.new(kind="level", parent_id=level.id, title="T")
    memory_db.tests[test.id] = test
    memory_db.tests_by_parent[("level", level.id)] = test.id
    memory_db.results.append(
        AssessmentResult.new(
            kind="level",
            user_id="learner-1",
            test_id=test.id,
            module_id=module.id,
            level_id=level.id,
            score=80,
            completed_at=at(1),
        )
    )

    resp = client.delete(f"/levels/{level.id}", headers=auth(author_token))

    assert resp.status_code == 204
    assert sub.id not in memory_db.sub_topics
    assert test.id not in memory_db.tests
    assert memory_db.results == []


def test_delete_unknown_level(client: TestClient, author_token: str) -> None:
    assert client.delete("/levels/nope", headers=auth(author_token)).status_code == 404


def test_get_content_returns_parent_ref(client: TestClient, token: str) -> None:
    sub = seed_sub_topic(seed_level(seed_module()))
    content = seed_content(sub)

    resp = client.get(f"/content/{content.id}", headers=auth(token))

    assert resp.status_code == 200
    assert resp.json() == {"id": content.id, "subTopicId": sub.id}


def test_get_content_not_found(client: TestClient, token: str) -> None:
    assert client.get("/content/nope", headers=auth(token)).status_code == 404
