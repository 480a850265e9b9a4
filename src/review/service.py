"""Use cases for reviewing flashcards and reading their scheduling state."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.db import Flashcard, FlashcardReview
from src.db.flashcards import DEFAULT_DUE_LIMIT
from src.db.study_sessions import StudySessionDelta
from src.review.errors import ConcurrentReviewError, NotFoundError, UnauthorizedError, ValidationError
from src.review.srs import (
    CORRECT_DIFFICULTIES,
    Difficulty,
    calculate_next_schedule,
    difficulty_to_quality,
    parse_difficulty,
)
from src.review.stores import FlashcardReviewStore, FlashcardStore, MaterialStore, StudySessionStore


LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

Identifier = Union[uuid.UUID, str]


@dataclass(slots=True)
class ReviewResult:
    """Flashcard state after a review and when it should be shown again."""

    flashcard: Flashcard
    next_review: datetime


@dataclass(slots=True)
class DueFlashcards:
    """Flashcards that are ready for review right now."""

    flashcards: List[Flashcard]
    total_due: int


@dataclass(slots=True)
class FlashcardHistory:
    """Reviews of a single flashcard, oldest first."""

    reviews: List[FlashcardReview]


def parse_identifier(value: Identifier, field: str) -> uuid.UUID:
    """Coerce caller input into a UUID or raise ``ValidationError``."""
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        try:
            return uuid.UUID(value)
        except ValueError:
            pass
    raise ValidationError(f"{field} must be a valid UUID; got {value!r}.", field=field)


def utc_now(now: Optional[datetime]) -> datetime:
    """Return ``now`` as an aware datetime, reading naive values as UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


async def resolve_owned_flashcard(
    session: AsyncSession,
    flashcards: FlashcardStore,
    materials: MaterialStore,
    user_id: uuid.UUID,
    flashcard_id: uuid.UUID,
) -> Flashcard:
    """Load a flashcard and confirm that its material belongs to ``user_id``."""
    flashcard = await flashcards.get(session, flashcard_id)
    if flashcard is None:
        raise NotFoundError("Flashcard", flashcard_id)

    material = await materials.get(session, flashcard.material_id)
    if material is None:
        LOGGER.warning("Flashcard %s references missing material %s.", flashcard_id, flashcard.material_id)
        raise NotFoundError("Material", flashcard.material_id)

    if material.owner_id != user_id:
        raise UnauthorizedError("Flashcard", flashcard_id)

    return flashcard


class ReviewFlashcardService:
    """Applies a review outcome to a flashcard and records its side effects.

    The flashcard update, the history row and the daily counter increment are
    written in one transaction. If another review of the same flashcard
    commits first, the version check fails and the whole unit is retried from
    the freshly persisted state.

    The returned flashcard is detached from its session before commit, so it
    stays readable whatever ``expire_on_commit`` the session factory uses.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        flashcards: FlashcardStore,
        materials: MaterialStore,
        reviews: FlashcardReviewStore,
        study_sessions: StudySessionStore,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self._session_factory = session_factory
        self._flashcards = flashcards
        self._materials = materials
        self._reviews = reviews
        self._study_sessions = study_sessions
        self._max_attempts = max_attempts

    async def review(
        self,
        user_id: Identifier,
        flashcard_id: Identifier,
        difficulty: Union[Difficulty, str],
        now: Optional[datetime] = None,
    ) -> ReviewResult:
        parsed_difficulty = parse_difficulty(difficulty)
        parsed_user_id = parse_identifier(user_id, "user_id")
        parsed_flashcard_id = parse_identifier(flashcard_id, "flashcard_id")
        reviewed_at = utc_now(now)

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = await self._review_once(
                    parsed_user_id, parsed_flashcard_id, parsed_difficulty, reviewed_at
                )
            except StaleDataError:
                LOGGER.warning(
                    "Flashcard %s changed during review (attempt %s of %s).",
                    parsed_flashcard_id,
                    attempt,
                    self._max_attempts,
                )
                continue

            LOGGER.info(
                "User %s reviewed flashcard %s as %s; next review in %s day(s).",
                parsed_user_id,
                parsed_flashcard_id,
                parsed_difficulty.value,
                result.flashcard.interval_days,
            )
            return result

        raise ConcurrentReviewError(parsed_flashcard_id, self._max_attempts)

    async def _review_once(
        self,
        user_id: uuid.UUID,
        flashcard_id: uuid.UUID,
        difficulty: Difficulty,
        now: datetime,
    ) -> ReviewResult:
        async with self._session_factory() as session:
            async with session.begin():
                flashcard = await resolve_owned_flashcard(
                    session, self._flashcards, self._materials, user_id, flashcard_id
                )

                schedule = calculate_next_schedule(
                    quality=difficulty_to_quality(difficulty),
                    current_ease=flashcard.ease_factor,
                    current_interval=flashcard.interval_days,
                    current_repetitions=flashcard.repetitions,
                    now=now,
                )

                await self._flashcards.update_schedule(session, flashcard, schedule, now=now)
                await self._reviews.add(
                    session,
                    flashcard_id=flashcard.id,
                    user_id=user_id,
                    difficulty=difficulty.value,
                    ease_factor_after=schedule.ease_factor,
                    interval_days_after=schedule.interval_days,
                    reviewed_at=now,
                )
                await self._study_sessions.upsert(
                    session,
                    user_id,
                    now,
                    StudySessionDelta(
                        flashcards_studied=1,
                        flashcards_correct=1 if difficulty in CORRECT_DIFFICULTIES else 0,
                    ),
                )
                session.expunge(flashcard)

        return ReviewResult(flashcard=flashcard, next_review=schedule.next_review)


class DueFlashcardsService:
    """Lists the flashcards a user should review now."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        flashcards: FlashcardStore,
        limit: int = DEFAULT_DUE_LIMIT,
    ) -> None:
        self._session_factory = session_factory
        self._flashcards = flashcards
        self._limit = min(limit, DEFAULT_DUE_LIMIT)

    async def list_due(self, user_id: Identifier, now: Optional[datetime] = None) -> DueFlashcards:
        parsed_user_id = parse_identifier(user_id, "user_id")
        async with self._session_factory() as session:
            flashcards = await self._flashcards.find_due(
                session, parsed_user_id, now=utc_now(now), limit=self._limit
            )
        return DueFlashcards(flashcards=flashcards, total_due=len(flashcards))


class FlashcardHistoryService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        flashcards: FlashcardStore,
        materials: MaterialStore,
        reviews: FlashcardReviewStore,
    ) -> None:
        self._session_factory = session_factory
        self._flashcards = flashcards
        self._materials = materials
        self._reviews = reviews

    async def get_history(self, user_id: Identifier, flashcard_id: Identifier) -> FlashcardHistory:
        parsed_user_id = parse_identifier(user_id, "user_id")
        parsed_flashcard_id = parse_identifier(flashcard_id, "flashcard_id")
        async with self._session_factory() as session:
            await resolve_owned_flashcard(
                session, self._flashcards, self._materials, parsed_user_id, parsed_flashcard_id
            )
            reviews = await self._reviews.list_for_flashcard(session, parsed_flashcard_id)
        return FlashcardHistory(reviews=reviews)


class MaterialFlashcardsService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        materials: MaterialStore,
        flashcards: FlashcardStore,
    ) -> None:
        self._session_factory = session_factory
        self._materials = materials
        self._flashcards = flashcards

    async def list_for_material(self, user_id: Identifier, material_id: Identifier) -> List[Flashcard]:
        """Return every flashcard of a material owned by ``user_id``."""
        parsed_user_id = parse_identifier(user_id, "user_id")
        parsed_material_id = parse_identifier(material_id, "material_id")
        async with self._session_factory() as session:
            material = await self._materials.get(session, parsed_material_id)
            if material is None:
                raise NotFoundError("Material", parsed_material_id)
            if material.owner_id != parsed_user_id:
                raise UnauthorizedError("Material", parsed_material_id)
            return await self._flashcards.list_by_material(session, parsed_material_id)
