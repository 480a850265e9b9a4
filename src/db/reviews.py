"""Append-only flashcard review history."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from . import FlashcardReview


class DatabaseFlashcardReviewStore:
    """Inserts and reads FlashcardReview rows; rows are never updated."""

    async def add(
        self,
        session: AsyncSession,
        *,
        flashcard_id: uuid.UUID,
        user_id: uuid.UUID,
        difficulty: str,
        ease_factor_after: float,
        interval_days_after: int,
        reviewed_at: Optional[datetime] = None,
    ) -> FlashcardReview:
        if reviewed_at is None:
            reviewed_at = datetime.now(timezone.utc)

        review = FlashcardReview(
            flashcard_id=flashcard_id,
            user_id=user_id,
            difficulty=difficulty,
            ease_factor_after=ease_factor_after,
            interval_days_after=interval_days_after,
            reviewed_at=reviewed_at,
        )
        session.add(review)
        await session.flush()
        return review

    async def list_for_flashcard(
        self, session: AsyncSession, flashcard_id: uuid.UUID
    ) -> list[FlashcardReview]:
        """Return the flashcard's reviews, oldest first."""
        stmt = (
            select(FlashcardReview)
            .where(FlashcardReview.flashcard_id == flashcard_id)
            .order_by(FlashcardReview.reviewed_at, FlashcardReview.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_difficulty(self, session: AsyncSession, user_id: uuid.UUID) -> dict[str, int]:
        stmt = (
            select(FlashcardReview.difficulty, func.count())
            .where(FlashcardReview.user_id == user_id)
            .group_by(FlashcardReview.difficulty)
        )
        result = await session.execute(stmt)
        return {difficulty: count for difficulty, count in result.all()}
