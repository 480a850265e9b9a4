"""Create per-user daily study session counters."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260302_0003"
down_revision: Union[str, None] = "20260301_0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "study_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("study_date", sa.Date(), nullable=False),
        sa.Column("flashcards_studied", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("flashcards_correct", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("quizzes_completed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("quizzes_correct", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("user_id", "study_date", name="uq_study_sessions_user_date"),
    )


def downgrade() -> None:
    op.drop_table("study_sessions")
