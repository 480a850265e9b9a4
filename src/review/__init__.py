"""Spaced-repetition review components."""

from .errors import ConcurrentReviewError, NotFoundError, ReviewError, UnauthorizedError, ValidationError
from .srs import Difficulty, ReviewSchedule, calculate_next_schedule, difficulty_to_quality, parse_difficulty

__all__ = [
    "ConcurrentReviewError",
    "Difficulty",
    "NotFoundError",
    "ReviewError",
    "ReviewSchedule",
    "UnauthorizedError",
    "ValidationError",
    "calculate_next_schedule",
    "difficulty_to_quality",
    "parse_difficulty",
]
