"""Create the append-only flashcard review history."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260301_0002"
down_revision: Union[str, None] = "20260301_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "flashcard_reviews",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("flashcard_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("difficulty", sa.String(length=16), nullable=False),
        sa.Column("ease_factor_after", sa.Float(), nullable=False),
        sa.Column("interval_days_after", sa.Integer(), nullable=False),
        sa.Column(
            "reviewed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ("flashcard_id",),
            ("flashcards.id",),
            name="fk_flashcard_reviews_flashcard_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_flashcard_reviews_flashcard_id", "flashcard_reviews", ("flashcard_id",))
    op.create_index("ix_flashcard_reviews_user_id", "flashcard_reviews", ("user_id",))


def downgrade() -> None:
    op.drop_index("ix_flashcard_reviews_user_id", table_name="flashcard_reviews")
    op.drop_index("ix_flashcard_reviews_flashcard_id", table_name="flashcard_reviews")
    op.drop_table("flashcard_reviews")
