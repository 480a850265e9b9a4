from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from src.review.errors import ValidationError
from src.review.srs import (
    CORRECT_DIFFICULTIES,
    Difficulty,
    calculate_next_schedule,
    difficulty_to_quality,
    parse_difficulty,
)


NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def _review(difficulty: str, ease: float, interval: int, repetitions: int):
    return calculate_next_schedule(
        quality=difficulty_to_quality(Difficulty(difficulty)),
        current_ease=ease,
        current_interval=interval,
        current_repetitions=repetitions,
        now=NOW,
    )


def test_difficulty_maps_onto_quality_scale() -> None:
    assert difficulty_to_quality(Difficulty.AGAIN) == 0
    assert difficulty_to_quality(Difficulty.HARD) == 2
    assert difficulty_to_quality(Difficulty.GOOD) == 3
    assert difficulty_to_quality(Difficulty.EASY) == 4
    assert CORRECT_DIFFICULTIES == {Difficulty.GOOD, Difficulty.EASY}


def test_difficulty_mapping_has_no_fallback() -> None:
    with pytest.raises(KeyError):
        difficulty_to_quality("medium")  # type: ignore[arg-type]


@pytest.mark.parametrize("raw", ["again", "hard", "good", "easy", Difficulty.EASY])
def test_parse_difficulty_accepts_known_labels(raw) -> None:
    assert parse_difficulty(raw).value == str(getattr(raw, "value", raw))


@pytest.mark.parametrize("raw", ["GOOD", "medium", "", None, 3])
def test_parse_difficulty_rejects_unknown_values(raw) -> None:
    with pytest.raises(ValidationError):
        parse_difficulty(raw)


def test_first_good_review_schedules_tomorrow() -> None:
    schedule = _review("good", 2.5, 0, 0)

    assert schedule.repetitions == 1
    assert schedule.interval_days == 1
    assert schedule.next_review == NOW + timedelta(days=1)


def test_second_good_review_schedules_six_days() -> None:
    schedule = _review("good", 2.5, 1, 1)

    assert schedule.repetitions == 2
    assert schedule.interval_days == 6


def test_third_good_review_uses_updated_ease_factor() -> None:
    schedule = _review("good", 2.5, 6, 2)

    # ease drops to 2.36 for quality 3, then 6 * 2.36 = 14.16 rounds to 14
    assert schedule.ease_factor == pytest.approx(2.36)
    assert schedule.repetitions == 3
    assert schedule.interval_days == 14


def test_easy_review_applies_bonus_after_growth() -> None:
    schedule = _review("easy", 2.5, 6, 2)

    # quality 4 leaves ease unchanged: round(6 * 2.5) = 15, round(15 * 1.3) = 20
    assert schedule.ease_factor == pytest.approx(2.5)
    assert schedule.repetitions == 3
    assert schedule.interval_days == 20


def test_easy_bonus_applies_to_early_steps_too() -> None:
    assert _review("easy", 2.5, 0, 0).interval_days == 1
    assert _review("easy", 2.5, 1, 1).interval_days == 8


def test_intervals_round_half_up() -> None:
    # 5 * 2.5 = 12.5 rounds up to 13 (banker's rounding would give 12)
    schedule = _review("easy", 2.5, 5, 2)
    assert schedule.interval_days == round(13 * 1.3)


def test_again_resets_progress_without_touching_ease() -> None:
    schedule = _review("again", 2.2, 10, 4)

    assert schedule.repetitions == 0
    assert schedule.interval_days == 1
    assert schedule.ease_factor == pytest.approx(2.2)
    assert schedule.next_review == NOW + timedelta(days=1)


def test_hard_resets_progress_and_lowers_ease() -> None:
    schedule = _review("hard", 2.5, 6, 2)

    assert schedule.repetitions == 0
    assert schedule.interval_days == 1
    assert schedule.ease_factor == pytest.approx(2.35)
    assert schedule.ease_factor < 2.5


def test_ease_factor_never_drops_below_floor() -> None:
    after_again = _review("again", 1.3, 1, 1)
    after_hard = _review("hard", 1.3, 1, 1)

    assert after_again.ease_factor >= 1.3
    assert after_hard.ease_factor == pytest.approx(1.3)


def test_repeated_good_reviews_settle_on_the_floor() -> None:
    ease, interval, repetitions = 2.5, 0, 0
    for _ in range(20):
        schedule = _review("good", ease, interval, repetitions)
        ease, interval, repetitions = schedule.ease_factor, schedule.interval_days, schedule.repetitions

    assert ease == pytest.approx(1.3)
    assert repetitions == 20


@pytest.mark.parametrize("difficulty", [member.value for member in Difficulty])
@pytest.mark.parametrize("ease", [1.3, 1.31, 1.45, 2.0, 2.5, 3.1])
@pytest.mark.parametrize("interval,repetitions", [(0, 0), (1, 1), (6, 2), (15, 3), (120, 9)])
def test_schedule_invariants_hold_for_any_state(difficulty, ease, interval, repetitions) -> None:
    schedule = _review(difficulty, ease, interval, repetitions)

    assert schedule.ease_factor >= 1.3
    assert schedule.interval_days >= 1
    if difficulty_to_quality(Difficulty(difficulty)) < 3:
        assert schedule.repetitions == 0
        assert schedule.interval_days == 1
    else:
        assert schedule.repetitions == repetitions + 1
    diff_days = (schedule.next_review - NOW) / timedelta(days=1)
    assert math.ceil(diff_days) == schedule.interval_days


def test_naive_now_is_treated_as_utc() -> None:
    schedule = calculate_next_schedule(
        quality=3,
        current_ease=2.5,
        current_interval=0,
        current_repetitions=0,
        now=datetime(2026, 1, 1, 12, 0),
    )

    assert schedule.next_review == datetime(2026, 1, 2, 12, 0, tzinfo=timezone.utc)


def test_default_now_is_current_utc_time() -> None:
    before = datetime.now(timezone.utc)
    schedule = calculate_next_schedule(
        quality=0, current_ease=2.5, current_interval=3, current_repetitions=2
    )

    assert before + timedelta(days=1) <= schedule.next_review <= datetime.now(timezone.utc) + timedelta(days=1)


@pytest.mark.parametrize("quality", [-1, 1, 5, 6])
def test_unsupported_quality_is_rejected(quality: int) -> None:
    with pytest.raises(ValueError):
        calculate_next_schedule(
            quality=quality,
            current_ease=2.5,
            current_interval=1,
            current_repetitions=1,
            now=NOW,
        )
