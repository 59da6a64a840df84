from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, seed_level, seed_module, seed_question, seed_sub_topic


@pytest.fixture
def level():
    return seed_level(seed_module())


@pytest.fixture
def sub_topic(level):
    return seed_sub_topic(level, "Breathing")


# ---- level tests ----


def test_get_level_test_requires_level_id(client: TestClient, token: str) -> None:
    resp = client.get("/level-tests", headers=auth(token))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Level ID is required"


def test_get_level_test_absent_is_null(client: TestClient, token: str, level) -> None:
    resp = client.get("/level-tests", params={"levelId": level.id}, headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() is None


def test_create_and_get_level_test(
    client: TestClient, token: str, author_token: str, level
) -> None:
    q1 = seed_question("first", letters="BA")
    q2 = seed_question("second")

    created = client.post(
        "/level-tests",
        json={"levelId": level.id, "title": "Final", "questions": [q1.id, q2.id]},
        headers=auth(author_token),
    )
    assert created.status_code == 201
    body = created.json()
    assert body["levelId"] == level.id
    assert body["totalQuestions"] == 2
    assert body["passingScore"] == 70
    assert body["timeLimit"] == 1800

    resp = client.get("/level-tests", params={"levelId": level.id}, headers=auth(token))
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Final"
    assert [q["question"] for q in data["questions"]] == ["first", "second"]
    assert [o["optionLetter"] for o in data["questions"][0]["options"]] == ["A", "B"]


def test_level_test_keeps_stored_total_after_dead_refs(
    client: TestClient, token: str, author_token: str, level
) -> None:
    q = seed_question()
    client.post(
        "/level-tests",
        json={"levelId": level.id, "title": "T", "questions": [q.id, "gone"]},
        headers=auth(author_token),
    )

    data = client.get(
        "/level-tests", params={"levelId": level.id}, headers=auth(token)
    ).json()

    assert len(data["questions"]) == 1
    assert data["totalQuestions"] == 2


def test_duplicate_level_test_is_400(
    client: TestClient, author_token: str, level
) -> None:
    body = {"levelId": level.id, "title": "T"}
    assert client.post("/level-tests", json=body, headers=auth(author_token)).status_code == 201

    resp = client.post("/level-tests", json=body, headers=auth(author_token))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Test already exists for this level"


def test_create_level_test_requires_title(client: TestClient, author_token: str, level) -> None:
    resp = client.post(
        "/level-tests", json={"levelId": level.id}, headers=auth(author_token)
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Level ID and title are required"


def test_create_level_test_unknown_level(client: TestClient, author_token: str) -> None:
    resp = client.post(
        "/level-tests", json={"levelId": "nope", "title": "T"}, headers=auth(author_token)
    )
    assert resp.status_code == 404


def test_learner_cannot_author_tests(client: TestClient, token: str, level) -> None:
    resp = client.post(
        "/level-tests", json={"levelId": level.id, "title": "T"}, headers=auth(token)
    )
    assert resp.status_code == 403


@pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
@pytest.mark.parametrize("path", ["/level-tests", "/sub-topic-tests", "/module-tests"])
def test_unsupported_methods_are_405(client: TestClient, method: str, path: str) -> None:
    resp = client.request(method, path)
    assert resp.status_code == 405
    assert resp.headers["allow"] == "GET, POST"


# ---- sub-topic tests ----


def test_get_sub_topic_test_requires_id(client: TestClient, token: str) -> None:
    resp = client.get("/sub-topic-tests", headers=auth(token))
    assert resp.status_code == 400


def test_get_sub_topic_test_missing_is_404(client: TestClient, token: str, sub_topic) -> None:
    resp = client.get(
        "/sub-topic-tests", params={"subTopicId": sub_topic.id}, headers=auth(token)
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "Test not found"


def test_create_sub_topic_test_defaults(
    client: TestClient, author_token: str, sub_topic
) -> None:
    resp = client.post(
        "/sub-topic-tests",
        json={"subTopicId": sub_topic.id},
        headers=auth(author_token),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Test for Breathing"
    assert body["description"] == "Test questions for Breathing"
    assert body["timeLimit"] == 600
    assert body["totalQuestions"] == 0


def test_sub_topic_test_total_counts_resolved_questions(
    client: TestClient, token: str, author_token: str, sub_topic
) -> None:
    q = seed_question()
    inline = {
        "id": "inline-1",
        "question": "embedded",
        "options": [{"id": "o", "optionText": "x", "optionLetter": "A", "isCorrect": True}],
    }
    client.post(
        "/sub-topic-tests",
        json={"subTopicId": sub_topic.id, "questions": [q.id, "gone", inline]},
        headers=auth(author_token),
    )

    data = client.get(
        "/sub-topic-tests", params={"subTopicId": sub_topic.id}, headers=auth(token)
    ).json()

    assert [x["id"] for x in data["questions"]] == [q.id, "inline-1"]
    assert data["totalQuestions"] == 2


def test_duplicate_sub_topic_test_is_409(
    client: TestClient, author_token: str, sub_topic
) -> None:
    body = {"subTopicId": sub_topic.id}
    client.post("/sub-topic-tests", json=body, headers=auth(author_token))

    resp = client.post("/sub-topic-tests", json=body, headers=auth(author_token))

    assert resp.status_code == 409


def test_tests_require_auth(client: TestClient) -> None:
    assert client.get("/level-tests", params={"levelId": "x"}).status_code == 401


# ---- inline question bodies ----


def test_inline_question_with_bad_letter_is_rejected_and_not_stored(
    client: TestClient, token: str, author_token: str, level
) -> None:
    inline = {
        "id": "inline-1",
        "question": "embedded",
        "options": [{"optionLetter": "A"}, {"optionLetter": 2}],
    }

    resp = client.post(
        "/level-tests",
        json={"levelId": level.id, "title": "T", "questions": [inline]},
        headers=auth(author_token),
    )

    assert resp.status_code == 400
    after = client.get("/level-tests", params={"levelId": level.id}, headers=auth(token))
    assert after.status_code == 200
    assert after.json() is None


def test_inline_question_is_stored_and_served_normalized(
    client: TestClient, token: str, author_token: str, sub_topic
) -> None:
    inline = {
        "id": "inline-1",
        "question": "embedded",
        "isActive": True,
        "options": [
            {"id": "b", "optionText": "two", "optionLetter": "B"},
            {"id": "a", "optionText": "one", "optionLetter": "A", "isCorrect": True},
        ],
    }

    created = client.post(
        "/sub-topic-tests",
        json={"subTopicId": sub_topic.id, "questions": [inline]},
        headers=auth(author_token),
    )
    assert created.status_code == 201

    data = client.get(
        "/sub-topic-tests", params={"subTopicId": sub_topic.id}, headers=auth(token)
    ).json()
    (question,) = data["questions"]
    assert question["question"] == "embedded"
    assert [o["optionLetter"] for o in question["options"]] == ["A", "B"]
    assert question["options"][0]["isCorrect"] is True


def test_non_text_question_element_is_rejected(
    client: TestClient, author_token: str, sub_topic
) -> None:
    resp = client.post(
        "/sub-topic-tests",
        json={"subTopicId": sub_topic.id, "questions": [{"question": 5}]},
        headers=auth(author_token),
    )
    assert resp.status_code == 400


# ---- check order: 401, then 400, then 403 ----


def test_authoring_without_token_is_401_before_body_checks(client: TestClient) -> None:
    assert client.post("/level-tests", json={}).status_code == 401


def test_learner_missing_fields_gets_400_not_403(client: TestClient, token: str) -> None:
    resp = client.post("/level-tests", json={"title": "T"}, headers=auth(token))
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Level ID and title are required"


def test_learner_cannot_author_sub_topic_tests(
    client: TestClient, token: str, sub_topic
) -> None:
    resp = client.post(
        "/sub-topic-tests", json={"subTopicId": sub_topic.id}, headers=auth(token)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["error"] == "Forbidden"


def test_learner_role_checked_before_level_lookup(client: TestClient, token: str) -> None:
    resp = client.post(
        "/level-tests", json={"levelId": "nope", "title": "T"}, headers=auth(token)
    )
    assert resp.status_code == 403


# ---- module tests ----


@pytest.fixture
def module():
    return seed_module("Capstone")


def test_get_module_test_absent_is_null(client: TestClient, token: str, module) -> None:
    resp = client.get("/module-tests", params={"moduleId": module.id}, headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() is None


def test_create_and_get_module_test(
    client: TestClient, token: str, author_token: str, module
) -> None:
    q = seed_question("final", letters="BA")

    created = client.post(
        "/module-tests",
        json={"moduleId": module.id, "title": "Final Exam", "questions": [q.id, "gone"]},
        headers=auth(author_token),
    )
    assert created.status_code == 201
    body = created.json()
    assert body["moduleId"] == module.id
    assert body["passingScore"] == 70
    assert body["timeLimit"] == 3600
    assert body["isActive"] is True
    assert body["totalQuestions"] == 2

    data = client.get(
        "/module-tests", params={"moduleId": module.id}, headers=auth(token)
    ).json()
    assert data["title"] == "Final Exam"
    assert data["module"]["title"] == "Capstone"
    assert [x["id"] for x in data["questions"]] == [q.id]
    assert [o["optionLetter"] for o in data["questions"][0]["options"]] == ["A", "B"]


def test_list_module_tests_newest_first(
    client: TestClient, token: str, author_token: str
) -> None:
    first = seed_module("First")
    second = seed_module("Second")
    for m in (first, second):
        resp = client.post(
            "/module-tests",
            json={"moduleId": m.id, "title": f"{m.title} exam"},
            headers=auth(author_token),
        )
        assert resp.status_code == 201

    data = client.get("/module-tests", headers=auth(token)).json()

    assert {t["moduleId"] for t in data} == {first.id, second.id}
    created = [t["createdAt"] for t in data]
    assert created == sorted(created, reverse=True)


def test_duplicate_module_test_is_400(
    client: TestClient, author_token: str, module
) -> None:
    body = {"moduleId": module.id, "title": "T"}
    assert client.post("/module-tests", json=body, headers=auth(author_token)).status_code == 201

    resp = client.post("/module-tests", json=body, headers=auth(author_token))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Test already exists for this module"


def test_module_test_requires_module_and_title(
    client: TestClient, author_token: str, module
) -> None:
    resp = client.post(
        "/module-tests", json={"moduleId": module.id}, headers=auth(author_token)
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Module ID and title are required"


def test_module_test_for_unknown_module(client: TestClient, author_token: str) -> None:
    resp = client.post(
        "/module-tests", json={"moduleId": "nope", "title": "T"}, headers=auth(author_token)
    )
    assert resp.status_code == 404


def test_learner_cannot_author_module_tests(client: TestClient, token: str, module) -> None:
    resp = client.post(
        "/module-tests", json={"moduleId": module.id, "title": "T"}, headers=auth(token)
    )
    assert resp.status_code == 403
