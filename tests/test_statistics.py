from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.db.flashcards import DatabaseFlashcardStore, DatabaseMaterialStore
from src.db.reviews import DatabaseFlashcardReviewStore
from src.db.study_sessions import DatabaseStudySessionStore, StudySessionDelta
from src.review.service import ReviewFlashcardService
from src.review.statistics import StatisticsService, current_streak


NOW = datetime(2026, 6, 15, 18, 0, tzinfo=timezone.utc)


def _statistics_service(factory, study_timezone=timezone.utc) -> StatisticsService:
    return StatisticsService(
        factory,
        DatabaseFlashcardStore(),
        DatabaseMaterialStore(),
        DatabaseFlashcardReviewStore(),
        DatabaseStudySessionStore(study_timezone),
        study_timezone=study_timezone,
    )


async def _record_activity(factory, user_id: uuid.UUID, day: date, **counters) -> None:
    store = DatabaseStudySessionStore()
    async with factory() as session:
        async with session.begin():
            await store.upsert(session, user_id, day, StudySessionDelta(**counters))


def test_streak_counts_consecutive_days_ending_today() -> None:
    today = date(2026, 6, 15)
    active = {today, today - timedelta(days=1), today - timedelta(days=2), today - timedelta(days=5)}

    assert current_streak(active, today) == 3
    assert current_streak(active - {today}, today) == 0
    assert current_streak(set(), today) == 0


def test_streak_is_bounded_by_window() -> None:
    today = date(2026, 6, 15)
    active = {today - timedelta(days=offset) for offset in range(100)}

    assert current_streak(active, today) == 60
    assert current_streak(active, today, window=10) == 10


@pytest.mark.asyncio
async def test_statistics_for_new_user_are_empty(session_factory) -> None:
    stats = await _statistics_service(session_factory).get_statistics(uuid.uuid4(), now=NOW)

    assert stats.total_materials == 0
    assert stats.total_flashcards == 0
    assert stats.new_flashcards == 0
    assert stats.due_now == 0
    assert stats.total_reviews == 0
    assert stats.difficulty_distribution == {"again": 0, "hard": 0, "good": 0, "easy": 0}
    assert stats.average_quality == 0.0
    assert stats.studied_today == 0
    assert stats.current_streak == 0
    assert stats.recent_activity == []


@pytest.mark.asyncio
async def test_statistics_summarise_reviews(session_factory, seed_material) -> None:
    user_id = uuid.uuid4()
    _, cards = await seed_material(session_factory, user_id, ["a", "b", "c", "d"])
    reviewer = ReviewFlashcardService(
        session_factory,
        DatabaseFlashcardStore(),
        DatabaseMaterialStore(),
        DatabaseFlashcardReviewStore(),
        DatabaseStudySessionStore(),
    )
    await reviewer.review(user_id, cards[0].id, "good", now=NOW - timedelta(hours=3))
    await reviewer.review(user_id, cards[1].id, "easy", now=NOW - timedelta(hours=2))
    await reviewer.review(user_id, cards[2].id, "again", now=NOW - timedelta(hours=1))

    stats = await _statistics_service(session_factory).get_statistics(user_id, now=NOW)

    assert stats.total_materials == 1
    assert stats.total_flashcards == 4
    assert stats.new_flashcards == 1
    # "d" was never scheduled and "again" is not due until tomorrow
    assert stats.due_now == 1
    assert stats.total_reviews == 3
    assert stats.difficulty_distribution == {"again": 1, "hard": 0, "good": 1, "easy": 1}
    assert stats.average_quality == pytest.approx(round((3 + 4 + 0) / 3, 2))
    assert stats.studied_today == 3
    assert stats.correct_today == 2
    assert stats.total_study_days == 1
    assert stats.current_streak == 1
    assert [activity.day for activity in stats.recent_activity] == [date(2026, 6, 15)]


@pytest.mark.asyncio
async def test_streak_and_recent_activity_come_from_daily_counters(session_factory) -> None:
    user_id = uuid.uuid4()
    today = date(2026, 6, 15)
    for offset in range(3):
        await _record_activity(session_factory, user_id, today - timedelta(days=offset), flashcards_studied=2)
    await _record_activity(session_factory, user_id, today - timedelta(days=4), quizzes_completed=1)
    await _record_activity(session_factory, user_id, today - timedelta(days=20), flashcards_studied=5)
    await _record_activity(session_factory, user_id, today - timedelta(days=3))

    stats = await _statistics_service(session_factory).get_statistics(user_id, now=NOW)

    assert stats.current_streak == 3
    assert stats.total_study_days == 5
    assert [activity.day for activity in stats.recent_activity] == [
        today - timedelta(days=4),
        today - timedelta(days=3),
        today - timedelta(days=2),
        today - timedelta(days=1),
        today,
    ]
    assert stats.studied_today == 2


@pytest.mark.asyncio
async def test_today_follows_study_timezone(session_factory) -> None:
    user_id = uuid.uuid4()
    tokyo = ZoneInfo("Asia/Tokyo")
    # 18:00 UTC on the 15th is already the 16th in Tokyo
    await _record_activity(session_factory, user_id, date(2026, 6, 16), flashcards_studied=1)

    utc_stats = await _statistics_service(session_factory).get_statistics(user_id, now=NOW)
    tokyo_stats = await _statistics_service(session_factory, tokyo).get_statistics(user_id, now=NOW)

    assert utc_stats.studied_today == 0
    assert tokyo_stats.studied_today == 1
    assert tokyo_stats.current_streak == 1


@pytest.mark.asyncio
async def test_statistics_do_not_mix_users(session_factory, seed_material) -> None:
    user_id, other_id = uuid.uuid4(), uuid.uuid4()
    await seed_material(session_factory, other_id, ["someone else's"])
    await _record_activity(session_factory, other_id, date(2026, 6, 15), flashcards_studied=9)

    stats = await _statistics_service(session_factory).get_statistics(str(user_id), now=NOW)

    assert stats.total_materials == 0
    assert stats.total_flashcards == 0
    assert stats.studied_today == 0
    assert stats.total_study_days == 0


@pytest.mark.asyncio
async def test_materials_are_counted_per_owner(session_factory, seed_material) -> None:
    user_id = uuid.uuid4()
    await seed_material(session_factory, user_id, ["cells"], title="Biology")
    await seed_material(session_factory, user_id, ["atoms"], title="Chemistry")
    await seed_material(session_factory, uuid.uuid4(), ["forces"], title="Physics")

    stats = await _statistics_service(session_factory).get_statistics(user_id, now=NOW)

    assert stats.total_materials == 2
    assert stats.total_flashcards == 2


@pytest.mark.asyncio
async def test_naive_now_is_read_as_utc(session_factory, seed_material) -> None:
    user_id = uuid.uuid4()
    _, cards = await seed_material(session_factory, user_id, ["due soon", "fresh"])
    reviewer = ReviewFlashcardService(
        session_factory,
        DatabaseFlashcardStore(),
        DatabaseMaterialStore(),
        DatabaseFlashcardReviewStore(),
        DatabaseStudySessionStore(),
    )
    await reviewer.review(user_id, cards[0].id, "good", now=NOW - timedelta(days=1))
    tokyo = ZoneInfo("Asia/Tokyo")

    aware = await _statistics_service(session_factory, tokyo).get_statistics(user_id, now=NOW)
    naive = await _statistics_service(session_factory, tokyo).get_statistics(
        user_id, now=NOW.replace(tzinfo=None)
    )

    assert naive.due_now == aware.due_now == 2
    assert naive.current_streak == aware.current_streak
    assert [activity.day for activity in naive.recent_activity] == [
        activity.day for activity in aware.recent_activity
    ]
