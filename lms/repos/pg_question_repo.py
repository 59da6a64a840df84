"""PostgreSQL implementation of QuestionRepo."""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db.tables import TestOptionRow, TestQuestionRow
from lms.models.assessment import Question, QuestionOption


class PgQuestionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, question_id: str) -> Question | None:
        row = await self._session.get(TestQuestionRow, question_id)
        if row is None:
            return None
        options = await self._options_for([question_id])
        return _row_to_question(row, options.get(question_id, []))

    async def add(self, question: Question) -> None:
        self._session.add(
            TestQuestionRow(
                id=question.id,
                question=question.question,
                is_active=question.is_active,
            )
        )
        # parent row must exist before its options reference it
        await self._session.flush()
        for opt in question.options:
            self._session.add(
                TestOptionRow(
                    id=opt.id,
                    question_id=question.id,
                    option_text=opt.option_text,
                    option_letter=opt.option_letter,
                    is_correct=opt.is_correct,
                )
            )
        await self._session.flush()

    async def list_active(self) -> list[Question]:
        stmt = select(TestQuestionRow).where(TestQuestionRow.is_active.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        options = await self._options_for([r.id for r in rows])
        return [_row_to_question(r, options.get(r.id, [])) for r in rows]

    async def _options_for(
        self, question_ids: list[str]
    ) -> dict[str, list[TestOptionRow]]:
        if not question_ids:
            return {}
        stmt = select(TestOptionRow).where(TestOptionRow.question_id.in_(question_ids))
        grouped: dict[str, list[TestOptionRow]] = defaultdict(list)
        for opt in (await self._session.execute(stmt)).scalars().all():
            grouped[opt.question_id].append(opt)
        return grouped


def _row_to_question(row: TestQuestionRow, options: list[TestOptionRow]) -> Question:
    return Question(
        id=row.id,
        question=row.question,
        options=tuple(
            QuestionOption(
                id=o.id,
                option_text=o.option_text,
                option_letter=o.option_letter,
                is_correct=o.is_correct,
            )
            for o in options
        ),
        is_active=row.is_active,
    )
