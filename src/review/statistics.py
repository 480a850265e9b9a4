"""Aggregated study statistics built from reviews and daily counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.study_sessions import study_day
from src.review.service import Identifier, parse_identifier, utc_now
from src.review.srs import Difficulty, difficulty_to_quality
from src.review.stores import FlashcardReviewStore, FlashcardStore, MaterialStore, StudySessionStore


STREAK_WINDOW_DAYS = 60
RECENT_ACTIVITY_DAYS = 7


@dataclass(slots=True)
class DailyActivity:
    """Counters for one calendar day."""

    day: date
    flashcards_studied: int
    flashcards_correct: int
    quizzes_completed: int


@dataclass(slots=True)
class StudyStatistics:
    """Snapshot of a user's flashcard progress."""

    total_materials: int
    total_flashcards: int
    new_flashcards: int
    due_now: int
    total_reviews: int
    difficulty_distribution: Dict[str, int]
    average_quality: float
    studied_today: int
    correct_today: int
    total_study_days: int
    current_streak: int
    recent_activity: List[DailyActivity] = field(default_factory=list)


def current_streak(active_days: set[date], today: date, window: int = STREAK_WINDOW_DAYS) -> int:
    """Count consecutive active days ending today; a quiet today means no streak."""
    streak = 0
    for offset in range(window):
        if today - timedelta(days=offset) not in active_days:
            break
        streak += 1
    return streak


class StatisticsService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        flashcards: FlashcardStore,
        materials: MaterialStore,
        reviews: FlashcardReviewStore,
        study_sessions: StudySessionStore,
        study_timezone: tzinfo = timezone.utc,
    ) -> None:
        self._session_factory = session_factory
        self._flashcards = flashcards
        self._materials = materials
        self._reviews = reviews
        self._study_sessions = study_sessions
        self._study_timezone = study_timezone

    async def get_statistics(self, user_id: Identifier, now: Optional[datetime] = None) -> StudyStatistics:
        parsed_user_id = parse_identifier(user_id, "user_id")
        now = utc_now(now)
        today = study_day(now, self._study_timezone)

        async with self._session_factory() as session:
            total_materials = await self._materials.count_for_owner(session, parsed_user_id)
            total_flashcards = await self._flashcards.count_for_user(session, parsed_user_id)
            new_flashcards = await self._flashcards.count_unscheduled(session, parsed_user_id)
            due_now = await self._flashcards.count_due(session, parsed_user_id, now)
            counts = await self._reviews.count_by_difficulty(session, parsed_user_id)
            total_study_days = await self._study_sessions.count_active_days(session, parsed_user_id)
            sessions = await self._study_sessions.list_since(
                session, parsed_user_id, today - timedelta(days=STREAK_WINDOW_DAYS - 1)
            )

        distribution = {member.value: counts.get(member.value, 0) for member in Difficulty}
        total_reviews = sum(distribution.values())
        total_quality = sum(
            difficulty_to_quality(Difficulty(label)) * count for label, count in distribution.items()
        )
        average_quality = round(total_quality / total_reviews, 2) if total_reviews else 0.0

        by_day = {row.study_date: row for row in sessions}
        active_days = {
            row.study_date for row in sessions if row.flashcards_studied or row.quizzes_completed
        }
        today_row = by_day.get(today)

        recent_start = today - timedelta(days=RECENT_ACTIVITY_DAYS - 1)
        recent_activity = [
            DailyActivity(
                day=row.study_date,
                flashcards_studied=row.flashcards_studied,
                flashcards_correct=row.flashcards_correct,
                quizzes_completed=row.quizzes_completed,
            )
            for row in sessions
            if recent_start <= row.study_date <= today
        ]

        return StudyStatistics(
            total_materials=total_materials,
            total_flashcards=total_flashcards,
            new_flashcards=new_flashcards,
            due_now=due_now,
            total_reviews=total_reviews,
            difficulty_distribution=distribution,
            average_quality=average_quality,
            studied_today=today_row.flashcards_studied if today_row else 0,
            correct_today=today_row.flashcards_correct if today_row else 0,
            total_study_days=total_study_days,
            current_streak=current_streak(active_days, today),
            recent_activity=recent_activity,
        )
