"""Create materials and flashcards with spaced-repetition state."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260301_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "materials",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_materials_owner_id", "materials", ("owner_id",))

    op.create_table(
        "flashcards",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("material_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("ease_factor", sa.Float(), server_default=sa.text("2.5"), nullable=False),
        sa.Column("interval_days", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("repetitions", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("next_review", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ("material_id",),
            ("materials.id",),
            name="fk_flashcards_material_id_materials",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint("ease_factor >= 1.3", name="ck_flashcards_ease_factor_min"),
        sa.CheckConstraint("interval_days >= 0", name="ck_flashcards_interval_days_non_negative"),
        sa.CheckConstraint("repetitions >= 0", name="ck_flashcards_repetitions_non_negative"),
    )
    op.create_index(
        "ix_flashcards_user_id_next_review",
        "flashcards",
        ("user_id", "next_review"),
    )
    op.create_index("ix_flashcards_material_id", "flashcards", ("material_id",))


def downgrade() -> None:
    op.drop_index("ix_flashcards_material_id", table_name="flashcards")
    op.drop_index("ix_flashcards_user_id_next_review", table_name="flashcards")
    op.drop_table("flashcards")
    op.drop_index("ix_materials_owner_id", table_name="materials")
    op.drop_table("materials")
