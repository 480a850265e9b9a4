"""Helpers for working with flashcard persistence."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Sequence

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from . import Flashcard, Material

if TYPE_CHECKING:
    from src.review.srs import ReviewSchedule


DEFAULT_EASE_FACTOR = 2.5
DEFAULT_DUE_LIMIT = 50


@dataclass(slots=True)
class FlashcardPayload:
    """Question/answer content for a flashcard that is about to be stored."""

    question: str
    answer: str

    def normalized(self) -> "FlashcardPayload":
        """Return a payload with leading/trailing whitespace stripped."""
        return FlashcardPayload(question=self.question.strip(), answer=self.answer.strip())


def due_flashcards_condition(now: datetime):
    """SQL predicate for cards that were never scheduled or are due by ``now``."""
    return or_(Flashcard.next_review.is_(None), Flashcard.next_review <= now)


def due_flashcards_ordering() -> tuple:
    """Nulls first, then oldest due date, independent of engine null ordering."""
    never_scheduled_first = case((Flashcard.next_review.is_(None), 0), else_=1)
    return (never_scheduled_first, Flashcard.next_review, Flashcard.created_at, Flashcard.id)


class DatabaseFlashcardStore:
    """SQLAlchemy-backed access to flashcards and their scheduling state."""

    async def get(self, session: AsyncSession, flashcard_id: uuid.UUID) -> Optional[Flashcard]:
        return await session.get(Flashcard, flashcard_id)

    async def find_due(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        now: Optional[datetime] = None,
        limit: int = DEFAULT_DUE_LIMIT,
    ) -> list[Flashcard]:
        """Return the user's flashcards that are ready for review, most urgent first.

        ``limit`` can only lower the cap of ``DEFAULT_DUE_LIMIT`` cards.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        limit = min(limit, DEFAULT_DUE_LIMIT)

        stmt = (
            select(Flashcard)
            .where(Flashcard.user_id == user_id, due_flashcards_condition(now))
            .order_by(*due_flashcards_ordering())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_material(self, session: AsyncSession, material_id: uuid.UUID) -> list[Flashcard]:
        stmt = (
            select(Flashcard)
            .where(Flashcard.material_id == material_id)
            .order_by(Flashcard.created_at, Flashcard.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def update_schedule(
        self,
        session: AsyncSession,
        flashcard: Flashcard,
        schedule: ReviewSchedule,
        now: Optional[datetime] = None,
    ) -> Flashcard:
        """Write a new schedule onto the flashcard.

        The flush carries the optimistic version check, so a concurrent review
        that committed first surfaces here as ``StaleDataError``.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        flashcard.ease_factor = schedule.ease_factor
        flashcard.interval_days = schedule.interval_days
        flashcard.repetitions = schedule.repetitions
        flashcard.next_review = schedule.next_review
        flashcard.updated_at = now
        await session.flush()
        return flashcard

    async def count_for_user(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Flashcard).where(Flashcard.user_id == user_id)
        return (await session.execute(stmt)).scalar_one()

    async def count_unscheduled(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(Flashcard)
            .where(Flashcard.user_id == user_id, Flashcard.next_review.is_(None))
        )
        return (await session.execute(stmt)).scalar_one()

    async def count_due(self, session: AsyncSession, user_id: uuid.UUID, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(Flashcard)
            .where(Flashcard.user_id == user_id, due_flashcards_condition(now))
        )
        return (await session.execute(stmt)).scalar_one()


class DatabaseMaterialStore:
    """Material access for ownership checks, seeding and statistics."""

    async def get(self, session: AsyncSession, material_id: uuid.UUID) -> Optional[Material]:
        return await session.get(Material, material_id)

    async def count_for_owner(self, session: AsyncSession, owner_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Material).where(Material.owner_id == owner_id)
        return (await session.execute(stmt)).scalar_one()

    async def create(
        self,
        session: AsyncSession,
        owner_id: uuid.UUID,
        title: str,
        content: str,
        flashcards: Sequence[FlashcardPayload] = (),
    ) -> Material:
        """Persist a material together with fresh, never-scheduled flashcards."""
        material = Material(owner_id=owner_id, title=title.strip(), content=content)
        session.add(material)
        await session.flush()

        for payload in flashcards:
            normalized = payload.normalized()
            if not normalized.question or not normalized.answer:
                continue
            session.add(
                Flashcard(
                    material_id=material.id,
                    user_id=owner_id,
                    question=normalized.question,
                    answer=normalized.answer,
                    ease_factor=DEFAULT_EASE_FACTOR,
                    interval_days=0,
                    repetitions=0,
                    next_review=None,
                )
            )
        await session.flush()
        return material
