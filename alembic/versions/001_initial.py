"""Initial tables: players, hint_unlocks, case_completions.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("hints", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("evidence_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hints_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("best_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_case_time", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed_cases_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("achievements_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_players_user_id"), "players", ["user_id"], unique=True)

    op.create_table(
        "hint_unlocks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("case_id", sa.String(128), nullable=False),
        sa.Column("unlock_id", sa.String(128), nullable=False),
        sa.Column("method", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "unlock_id", name="uq_hint_unlocks_user_unlock"),
    )
    op.create_index(op.f("ix_hint_unlocks_user_id"), "hint_unlocks", ["user_id"], unique=False)
    op.create_index(op.f("ix_hint_unlocks_case_id"), "hint_unlocks", ["case_id"], unique=False)

    op.create_table(
        "case_completions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("case_id", sa.String(128), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("clues_found", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hints_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_repeat", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_case_completions_player_id"), "case_completions", ["player_id"], unique=False)
    op.create_index(op.f("ix_case_completions_case_id"), "case_completions", ["case_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_case_completions_case_id"), table_name="case_completions")
    op.drop_index(op.f("ix_case_completions_player_id"), table_name="case_completions")
    op.drop_table("case_completions")
    op.drop_index(op.f("ix_hint_unlocks_case_id"), table_name="hint_unlocks")
    op.drop_index(op.f("ix_hint_unlocks_user_id"), table_name="hint_unlocks")
    op.drop_table("hint_unlocks")
    op.drop_index(op.f("ix_players_user_id"), table_name="players")
    op.drop_table("players")
