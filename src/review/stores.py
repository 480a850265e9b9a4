"""Storage capabilities the review use cases depend on.

Each service receives concrete stores through its constructor; the database
implementations live in ``src.db``. Every method takes the ``AsyncSession``
of the unit of work it participates in, so a use case controls the
transaction boundary.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Protocol, Union

from sqlalchemy.ext.asyncio import AsyncSession

from src.db import Flashcard, FlashcardReview, Material, StudySession
from src.db.study_sessions import StudySessionDelta
from src.review.srs import ReviewSchedule


class FlashcardStore(Protocol):
    async def get(self, session: AsyncSession, flashcard_id: uuid.UUID) -> Optional[Flashcard]: ...

    async def find_due(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        now: Optional[datetime] = None,
        limit: int = ...,
    ) -> list[Flashcard]: ...

    async def list_by_material(self, session: AsyncSession, material_id: uuid.UUID) -> list[Flashcard]: ...

    async def update_schedule(
        self,
        session: AsyncSession,
        flashcard: Flashcard,
        schedule: ReviewSchedule,
        now: Optional[datetime] = None,
    ) -> Flashcard: ...

    async def count_for_user(self, session: AsyncSession, user_id: uuid.UUID) -> int: ...

    async def count_unscheduled(self, session: AsyncSession, user_id: uuid.UUID) -> int: ...

    async def count_due(self, session: AsyncSession, user_id: uuid.UUID, now: datetime) -> int: ...


class MaterialStore(Protocol):
    async def get(self, session: AsyncSession, material_id: uuid.UUID) -> Optional[Material]: ...

    async def count_for_owner(self, session: AsyncSession, owner_id: uuid.UUID) -> int: ...


class FlashcardReviewStore(Protocol):
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
    ) -> FlashcardReview: ...

    async def list_for_flashcard(
        self, session: AsyncSession, flashcard_id: uuid.UUID
    ) -> list[FlashcardReview]: ...

    async def count_by_difficulty(self, session: AsyncSession, user_id: uuid.UUID) -> dict[str, int]: ...


class StudySessionStore(Protocol):
    async def upsert(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        day: Union[date, datetime],
        delta: StudySessionDelta,
    ) -> StudySession: ...

    async def get(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        day: Union[date, datetime],
    ) -> Optional[StudySession]: ...

    async def list_since(
        self, session: AsyncSession, user_id: uuid.UUID, since: date
    ) -> list[StudySession]: ...

    async def count_active_days(self, session: AsyncSession, user_id: uuid.UUID) -> int: ...
