"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in lms/models/.
Repos convert between SQLAlchemy rows and domain dataclasses.

Uniqueness that the services rely on lives here, not in application code:
one test per level, subtopic or module, one enrollment per (user,
module).  Child rows cascade with their parent.
"""

from __future__ import annotations

import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from lms.db.engine import Base

# --- Course catalog ---


class ModuleRow(Base):
    __tablename__ = "modules"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class LevelRow(Base):
    __tablename__ = "levels"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    module_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("modules.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class SubTopicRow(Base):
    __tablename__ = "sub_topics"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    level_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("levels.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    learning_objectives: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class SubTopicContentRow(Base):
    __tablename__ = "sub_topic_contents"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sub_topic_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("sub_topics.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


# --- Question bank ---


class TestQuestionRow(Base):
    __tablename__ = "test_questions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TestOptionRow(Base):
    __tablename__ = "test_options"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    question_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("test_questions.id", ondelete="CASCADE"), nullable=False
    )
    option_text: Mapped[str] = mapped_column(Text, nullable=False)
    option_letter: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


# --- Tests ---


class LevelTestRow(Base):
    __tablename__ = "level_tests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    level_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("levels.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    questions: Mapped[Any] = mapped_column(JSON, nullable=True)
    total_questions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=70)
    time_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=1800)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class SubTopicTestRow(Base):
    __tablename__ = "sub_topic_tests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sub_topic_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("sub_topics.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    questions: Mapped[Any] = mapped_column(JSON, nullable=True)
    total_questions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=70)
    time_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=600)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class ModuleTestRow(Base):
    """The final test of a module; passing it starts the certificate clock."""

    __tablename__ = "module_tests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    module_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("modules.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    questions: Mapped[Any] = mapped_column(JSON, nullable=True)
    total_questions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=70)
    time_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=3600)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# --- Learner state ---


class ModuleEnrollmentRow(Base):
    __tablename__ = "module_enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "module_id", name="uq_enrollment_user_module"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    module_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("modules.id", ondelete="CASCADE"), nullable=False
    )
    progress_percentage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    completed_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="PENDING"
    )
    completed_sub_topics: Mapped[Any] = mapped_column(JSON, nullable=True)
    enrolled_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class LevelTestResultRow(Base):
    __tablename__ = "level_test_results"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    test_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("level_tests.id", ondelete="CASCADE"), nullable=False
    )
    module_id: Mapped[str] = mapped_column(String(64), nullable=False)
    level_id: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    total_questions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct_answers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    answers: Mapped[Any] = mapped_column(JSON, nullable=True)
    completed_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class SubTopicTestResultRow(Base):
    __tablename__ = "sub_topic_test_results"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    test_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("sub_topic_tests.id", ondelete="CASCADE"),
        nullable=False,
    )
    module_id: Mapped[str] = mapped_column(String(64), nullable=False)
    level_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sub_topic_id: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    total_questions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct_answers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    answers: Mapped[Any] = mapped_column(JSON, nullable=True)
    completed_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class ModuleTestResultRow(Base):
    __tablename__ = "module_test_results"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    test_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("module_tests.id", ondelete="CASCADE"),
        nullable=False,
    )
    module_id: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    total_questions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct_answers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    answers: Mapped[Any] = mapped_column(JSON, nullable=True)
    completed_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class ProfileRow(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # user id
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(64), nullable=False, default="learner")
    test_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    test_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    certificate_issued: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    certificate_available_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    certificate_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    certificate_issued_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
