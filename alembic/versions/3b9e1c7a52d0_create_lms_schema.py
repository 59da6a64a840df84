"""create lms schema

Revision ID: 3b9e1c7a52d0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c7a52d0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_ID = sa.String(length=64)


def _tz() -> sa.DateTime:
    return sa.DateTime(timezone=True)


def upgrade() -> None:
    op.create_table(
        "modules",
        sa.Column("id", _ID, primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "levels",
        sa.Column("id", _ID, primary_key=True),
        sa.Column(
            "module_id",
            _ID,
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "sub_topics",
        sa.Column("id", _ID, primary_key=True),
        sa.Column(
            "level_id",
            _ID,
            sa.ForeignKey("levels.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("learning_objectives", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "sub_topic_contents",
        sa.Column("id", _ID, primary_key=True),
        sa.Column(
            "sub_topic_id",
            _ID,
            sa.ForeignKey("sub_topics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False, server_default=""),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "is_published", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
    )
    op.create_table(
        "test_questions",
        sa.Column("id", _ID, primary_key=True),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_table(
        "test_options",
        sa.Column("id", _ID, primary_key=True),
        sa.Column(
            "question_id",
            _ID,
            sa.ForeignKey("test_questions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("option_text", sa.Text(), nullable=False),
        sa.Column("option_letter", sa.String(length=8), nullable=False, server_default=""),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    for table, parent_col, parent_table, time_limit in (
        ("level_tests", "level_id", "levels", "1800"),
        ("sub_topic_tests", "sub_topic_id", "sub_topics", "600"),
    ):
        op.create_table(
            table,
            sa.Column("id", _ID, primary_key=True),
            sa.Column(
                parent_col,
                _ID,
                sa.ForeignKey(f"{parent_table}.id", ondelete="CASCADE"),
                nullable=False,
                unique=True,
            ),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("questions", sa.JSON(), nullable=True),
            sa.Column("total_questions", sa.Integer(), nullable=True),
            sa.Column("passing_score", sa.Integer(), nullable=False, server_default="70"),
            sa.Column(
                "time_limit", sa.Integer(), nullable=False, server_default=time_limit
            ),
            sa.Column(
                "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
            ),
            sa.Column(
                "created_at", _tz(), nullable=False, server_default=sa.func.now()
            ),
        )
    op.create_table(
        "module_enrollments",
        sa.Column("id", _ID, primary_key=True),
        sa.Column("user_id", _ID, nullable=False, index=True),
        sa.Column(
            "module_id",
            _ID,
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "progress_percentage", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("completed_at", _tz(), nullable=True),
        sa.Column(
            "payment_status", sa.String(length=16), nullable=False, server_default="PENDING"
        ),
        sa.Column("completed_sub_topics", sa.JSON(), nullable=True),
        sa.Column("enrolled_at", _tz(), nullable=False),
        sa.UniqueConstraint("user_id", "module_id", name="uq_enrollment_user_module"),
    )
    for table, test_table, extra in (
        ("level_test_results", "level_tests", []),
        (
            "sub_topic_test_results",
            "sub_topic_tests",
            [sa.Column("sub_topic_id", _ID, nullable=False)],
        ),
    ):
        op.create_table(
            table,
            sa.Column("id", _ID, primary_key=True),
            sa.Column("user_id", _ID, nullable=False, index=True),
            sa.Column(
                "test_id",
                _ID,
                sa.ForeignKey(f"{test_table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("module_id", _ID, nullable=False),
            sa.Column("level_id", _ID, nullable=False),
            *extra,
            sa.Column("score", sa.Float(), nullable=False),
            sa.Column("total_questions", sa.Integer(), nullable=True),
            sa.Column("correct_answers", sa.Integer(), nullable=True),
            sa.Column("passed", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("answers", sa.JSON(), nullable=True),
            sa.Column("completed_at", _tz(), nullable=False),
        )
    op.create_table(
        "profiles",
        sa.Column("id", _ID, primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=64), nullable=False, server_default="learner"),
        sa.Column(
            "test_completed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "certificate_issued", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("certificate_available_at", _tz(), nullable=True),
        sa.Column("certificate_url", sa.Text(), nullable=True),
        sa.Column("certificate_issued_at", _tz(), nullable=True),
    )


def downgrade() -> None:
    for table in (
        "profiles",
        "sub_topic_test_results",
        "level_test_results",
        "module_enrollments",
        "sub_topic_tests",
        "level_tests",
        "test_options",
        "test_questions",
        "sub_topic_contents",
        "sub_topics",
        "levels",
        "modules",
    ):
        op.drop_table(table)
