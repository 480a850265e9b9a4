"""Spaced-repetition scheduling helpers for flashcard reviews."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from src.db.flashcards import DEFAULT_EASE_FACTOR
from src.review.errors import ValidationError


MIN_EASE_FACTOR = 1.3
HARD_EASE_PENALTY = 0.15
EASY_INTERVAL_BONUS = 1.3


class Difficulty(str, Enum):
    """Self-assessed outcome of a flashcard review."""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


_QUALITY_BY_DIFFICULTY = {
    Difficulty.AGAIN: 0,
    Difficulty.HARD: 2,
    Difficulty.GOOD: 3,
    Difficulty.EASY: 4,
}

VALID_QUALITIES = frozenset(_QUALITY_BY_DIFFICULTY.values())
CORRECT_DIFFICULTIES = frozenset({Difficulty.GOOD, Difficulty.EASY})


@dataclass(slots=True)
class ReviewSchedule:
    """Calculated review data for a flashcard after receiving a quality score."""

    next_review: datetime
    ease_factor: float
    interval_days: int
    repetitions: int


def difficulty_to_quality(difficulty: Difficulty) -> int:
    """Map a difficulty label onto the SM-2 quality scale."""
    return _QUALITY_BY_DIFFICULTY[difficulty]


def parse_difficulty(value: object) -> Difficulty:
    """Validate raw caller input as one of the four difficulty labels."""
    if isinstance(value, Difficulty):
        return value
    if isinstance(value, str):
        try:
            return Difficulty(value)
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in Difficulty)
    raise ValidationError(f"difficulty must be one of: {allowed}; got {value!r}.")


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; intervals round .5 upwards.
    return math.floor(value + 0.5)


def calculate_next_schedule(
    *,
    quality: int,
    current_ease: float,
    current_interval: int,
    current_repetitions: int,
    now: datetime | None = None,
) -> ReviewSchedule:
    """Return the next review schedule using the SM-2 variant of this platform.

    Failing grades (quality below 3) restart the card at a one-day interval.
    Only ``hard`` (quality 2) lowers the ease factor on failure; ``again``
    keeps it. Passing grades adjust ease with the SM-2 formula, step through
    the 1 and 6 day intervals, then grow the previous interval by the updated
    ease. ``easy`` multiplies the resulting interval by a further 1.3. The
    ease factor is clamped to 1.3 after every branch.
    """
    if quality not in VALID_QUALITIES:
        raise ValueError(f"Unsupported review quality: {quality!r}.")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    ease_factor = DEFAULT_EASE_FACTOR if current_ease is None else current_ease
    interval_days = current_interval or 0
    repetitions = current_repetitions or 0

    if quality < 3:
        repetitions = 0
        interval_days = 1
        if quality == 2:
            ease_factor -= HARD_EASE_PENALTY
    else:
        ease_factor += 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
        repetitions += 1
        if repetitions == 1:
            interval_days = 1
        elif repetitions == 2:
            interval_days = 6
        else:
            interval_days = _round_half_up(interval_days * ease_factor)

        if quality == 4:
            interval_days = _round_half_up(interval_days * EASY_INTERVAL_BONUS)

    ease_factor = max(MIN_EASE_FACTOR, ease_factor)

    # Aware datetimes add wall-clock days in their own zone (calendar days).
    next_review = now + timedelta(days=interval_days)

    return ReviewSchedule(
        next_review=next_review,
        ease_factor=ease_factor,
        interval_days=interval_days,
        repetitions=repetitions,
    )
