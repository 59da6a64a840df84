"""Request/response bodies.

The wire format is camelCase; Python attributes stay snake_case.
FastAPI serializes response models by alias, so every model below
renders camelCase keys.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lms.models.assessment import AssembledQuestion, AssembledTest
from lms.models.catalog import Level, Module, SubTopic, SubTopicContent
from lms.models.enrollment import ModuleEnrollment
from lms.models.result import NamedRef, ResultDetail


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Catalog ---


class ModuleOut(CamelModel):
    id: str
    title: str
    description: str
    is_active: bool

    @classmethod
    def of(cls, m: Module) -> ModuleOut:
        return cls(
            id=m.id, title=m.title, description=m.description, is_active=m.is_active
        )


class LevelOut(CamelModel):
    id: str
    module_id: str
    title: str
    order_index: int

    @classmethod
    def of(cls, lv: Level) -> LevelOut:
        return cls(
            id=lv.id, module_id=lv.module_id, title=lv.title, order_index=lv.order_index
        )


class ModuleDetailOut(ModuleOut):
    levels: list[LevelOut] = []


class ContentOut(CamelModel):
    id: str
    sub_topic_id: str
    title: str
    body: str
    order_index: int

    @classmethod
    def of(cls, c: SubTopicContent) -> ContentOut:
        return cls(
            id=c.id,
            sub_topic_id=c.sub_topic_id,
            title=c.title,
            body=c.body,
            order_index=c.order_index,
        )


class ContentRefOut(CamelModel):
    id: str
    sub_topic_id: str


class SubTopicOut(CamelModel):
    id: str
    level_id: str
    title: str
    description: str | None
    order_index: int
    estimated_duration: int | None
    learning_objectives: str | None
    is_active: bool
    contents: list[ContentOut] = []

    @classmethod
    def of(
        cls, st: SubTopic, contents: list[SubTopicContent] | None = None
    ) -> SubTopicOut:
        return cls(
            id=st.id,
            level_id=st.level_id,
            title=st.title,
            description=st.description,
            order_index=st.order_index,
            estimated_duration=st.estimated_duration,
            learning_objectives=st.learning_objectives,
            is_active=st.is_active,
            contents=[ContentOut.of(c) for c in contents or []],
        )


class SubTopicIn(CamelModel):
    level_id: str
    title: str = Field(min_length=1)
    description: str | None = None
    order_index: int = 0
    estimated_duration: int | None = None
    learning_objectives: str | None = None


class SubTopicPatchIn(CamelModel):
    """Partial update.  Only fields present in the request body are applied;
    an explicit null clears a nullable field."""

    title: str | None = None
    description: str | None = None
    order_index: int | None = None
    estimated_duration: int | None = None
    learning_objectives: str | None = None
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        supplied = self.model_dump(exclude_unset=True)
        # title/order_index/is_active are NOT NULL; a null there means "leave"
        return {
            k: v
            for k, v in supplied.items()
            if v is not None or k not in _NOT_NULL_SUB_TOPIC_FIELDS
        }


_NOT_NULL_SUB_TOPIC_FIELDS = frozenset({"title", "order_index", "is_active"})


# --- Tests ---


class OptionOut(CamelModel):
    id: str | None
    option_text: str | None
    option_letter: str
    is_correct: bool


class QuestionOut(CamelModel):
    id: str | None
    question: str | None
    options: list[OptionOut]

    @classmethod
    def of(cls, q: AssembledQuestion) -> QuestionOut:
        return cls(
            id=q.id,
            question=q.question,
            options=[
                OptionOut(
                    id=o.id,
                    option_text=o.option_text,
                    option_letter=o.option_letter,
                    is_correct=o.is_correct,
                )
                for o in q.options
            ],
        )


class _TestOut(CamelModel):
    id: str
    title: str
    description: str | None
    questions: list[QuestionOut]
    total_questions: int | None
    passing_score: int
    time_limit: int
    is_active: bool
    created_at: datetime | None = None


class LevelTestOut(_TestOut):
    level_id: str

    @classmethod
    def of(cls, t: AssembledTest) -> LevelTestOut:
        a = t.assessment
        return cls(
            id=a.id,
            level_id=a.parent_id,
            title=a.title,
            description=a.description,
            questions=[QuestionOut.of(q) for q in t.questions],
            total_questions=a.total_questions,
            passing_score=a.passing_score,
            time_limit=a.time_limit,
            is_active=a.is_active,
            created_at=a.created_at,
        )


class SubTopicTestOut(_TestOut):
    sub_topic_id: str

    @classmethod
    def of(cls, t: AssembledTest) -> SubTopicTestOut:
        a = t.assessment
        return cls(
            id=a.id,
            sub_topic_id=a.parent_id,
            title=a.title,
            description=a.description,
            questions=[QuestionOut.of(q) for q in t.questions],
            # what the learner actually gets, after dropping dead refs
            total_questions=len(t.questions),
            passing_score=a.passing_score,
            time_limit=a.time_limit,
            is_active=a.is_active,
            created_at=a.created_at,
        )


class InlineOptionIn(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    option_text: str | None = None
    option_letter: str = ""
    is_correct: bool = False


class InlineQuestionIn(CamelModel):
    """A question embedded in the test record instead of referenced by id.

    Unknown keys are kept as sent; the known ones must have the right
    types, so a record that cannot be assembled is never stored.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    question: str | None = None
    options: list[InlineOptionIn] = []


QuestionRefIn = str | InlineQuestionIn


def stored_questions(questions: list[QuestionRefIn] | None) -> list[Any] | None:
    """The JSON kept on the test: ids as-is, inline questions as camelCase."""
    if questions is None:
        return None
    return [
        q if isinstance(q, str) else q.model_dump(by_alias=True) for q in questions
    ]


class LevelTestIn(CamelModel):
    level_id: str | None = None
    title: str | None = None
    description: str | None = None
    questions: list[QuestionRefIn] | None = None
    total_questions: int | None = None
    passing_score: int | None = None
    time_limit: int | None = None
    is_active: bool | None = None


class SubTopicTestIn(CamelModel):
    sub_topic_id: str | None = None
    title: str | None = None
    description: str | None = None
    questions: list[QuestionRefIn] | None = None
    passing_score: int | None = None
    time_limit: int | None = None


class ModuleTestOut(_TestOut):
    module_id: str
    module: ModuleOut | None = None

    @classmethod
    def of(cls, t: AssembledTest, module: Module | None = None) -> ModuleTestOut:
        a = t.assessment
        return cls(
            id=a.id,
            module_id=a.parent_id,
            module=ModuleOut.of(module) if module is not None else None,
            title=a.title,
            description=a.description,
            questions=[QuestionOut.of(q) for q in t.questions],
            total_questions=a.total_questions,
            passing_score=a.passing_score,
            time_limit=a.time_limit,
            is_active=a.is_active,
            created_at=a.created_at,
        )


class ModuleTestIn(CamelModel):
    module_id: str | None = None
    title: str | None = None
    description: str | None = None
    questions: list[QuestionRefIn] | None = None
    total_questions: int | None = None
    passing_score: int | None = None
    time_limit: int | None = None
    is_active: bool | None = None


# --- Enrollment ---


class EnrollmentOut(CamelModel):
    id: str
    user_id: str
    module_id: str
    progress_percentage: int
    completed_at: datetime | None
    payment_status: str
    completed_sub_topics: Any = None
    enrolled_at: datetime

    @classmethod
    def of(cls, e: ModuleEnrollment) -> EnrollmentOut:
        return cls(
            id=e.id,
            user_id=e.user_id,
            module_id=e.module_id,
            progress_percentage=e.progress_percentage,
            completed_at=e.completed_at,
            payment_status=e.payment_status,
            completed_sub_topics=e.completed_sub_topics,
            enrolled_at=e.enrolled_at,
        )


class EnrollmentWithModuleOut(EnrollmentOut):
    module: ModuleOut | None = None


class ProgressIn(CamelModel):
    progress: int | None = None
    completed: bool | None = None


# --- Results ---


class RefOut(CamelModel):
    id: str | None
    title: str

    @classmethod
    def of(cls, ref: NamedRef) -> RefOut:
        return cls(id=ref.id, title=ref.title)


class ResultOut(CamelModel):
    id: str
    type: str
    test_id: str
    test_title: str
    test_description: str | None
    score: float
    total_questions: int | None
    correct_answers: int | None
    passed: bool
    completed_at: datetime
    module: RefOut
    level: RefOut | None = None
    subtopic: RefOut | None = None

    @classmethod
    def of(cls, d: ResultDetail) -> ResultOut:
        r = d.result
        return cls(
            id=r.id,
            type=r.kind,
            test_id=r.test_id,
            test_title=d.test_title,
            test_description=d.test_description,
            score=r.score,
            total_questions=r.total_questions,
            correct_answers=r.correct_answers,
            passed=r.passed,
            completed_at=r.completed_at,
            module=RefOut.of(d.module),
            level=RefOut.of(d.level) if d.level is not None else None,
            subtopic=RefOut.of(d.sub_topic) if d.sub_topic is not None else None,
        )


class ResultIn(CamelModel):
    test_id: str | None = None
    module_id: str | None = None
    level_id: str | None = None
    sub_topic_id: str | None = None
    score: float | None = None
    total_questions: int | None = None
    correct_answers: int | None = None
    passed: bool | None = None
    answers: Any = None


class ModuleResultIn(CamelModel):
    module_test_id: str | None = None
    module_id: str | None = None
    score: float | None = None
    total_questions: int | None = None
    correct_answers: int | None = None
    passed: bool | None = None
    answers: Any = None


# --- Payments / certificates ---


class PaymentInitIn(CamelModel):
    email: str = Field(min_length=3)
    amount: int = Field(gt=0)  # minor unit (cents)
    reference: str | None = None
    metadata: dict[str, Any] | None = None
    callback_url: str | None = None


class CertificateIssuedOut(CamelModel):
    success: bool = True
    certificate_url: str
    issued_at: datetime


class ScoredItemOut(CamelModel):
    id: str | None = None
    title: str | None = None
    score: float
    passed: bool
    completed_at: datetime


class LevelSummaryOut(CamelModel):
    id: str
    title: str
    sub_topics: list[ScoredItemOut]
    level_test: ScoredItemOut | None
    average_score: int


class ModuleSummaryOut(CamelModel):
    id: str
    title: str
    completed_at: datetime | None
    levels: list[LevelSummaryOut]
    average_score: int


class CertificateUserOut(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: str


class CertificateDataOut(CamelModel):
    user: CertificateUserOut
    modules: list[ModuleSummaryOut]
