"""add module tests

Revision ID: 8d2f41c6e0b7
Revises: 3b9e1c7a52d0
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d2f41c6e0b7"
down_revision: str | Sequence[str] | None = "3b9e1c7a52d0"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_ID = sa.String(length=64)


def upgrade() -> None:
    op.create_table(
        "module_tests",
        sa.Column("id", _ID, primary_key=True),
        sa.Column(
            "module_id",
            _ID,
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("questions", sa.JSON(), nullable=True),
        sa.Column("total_questions", sa.Integer(), nullable=True),
        sa.Column("passing_score", sa.Integer(), nullable=False, server_default="70"),
        sa.Column("time_limit", sa.Integer(), nullable=False, server_default="3600"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_table(
        "module_test_results",
        sa.Column("id", _ID, primary_key=True),
        sa.Column("user_id", _ID, nullable=False, index=True),
        sa.Column(
            "test_id",
            _ID,
            sa.ForeignKey("module_tests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("module_id", _ID, nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=True),
        sa.Column("correct_answers", sa.Integer(), nullable=True),
        sa.Column("passed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("answers", sa.JSON(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.add_column("profiles", sa.Column("test_score", sa.Float(), nullable=True))


def downgrade() -> None:
    op.drop_column("profiles", "test_score")
    op.drop_table("module_test_results")
    op.drop_table("module_tests")
