from __future__ import annotations

from typing import Protocol

from lms.models.assessment import Question
from lms.repos.memory import MemoryDB


class QuestionRepo(Protocol):
    async def get(self, question_id: str) -> Question | None: ...
    async def add(self, question: Question) -> None: ...
    async def list_active(self) -> list[Question]: ...


class InMemoryQuestionRepo:
    def __init__(self, db: MemoryDB) -> None:
        self._db = db

    async def get(self, question_id: str) -> Question | None:
        return self._db.questions.get(question_id)

    async def add(self, question: Question) -> None:
        if question.id in self._db.questions:
            raise ValueError("question already exists")
        self._db.questions[question.id] = question

    async def list_active(self) -> list[Question]:
        return [q for q in self._db.questions.values() if q.is_active]
