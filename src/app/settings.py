"""Configuration helpers for the Flashcard Review Scheduler runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.db.flashcards import DEFAULT_DUE_LIMIT


DEFAULT_MAX_REVIEW_ATTEMPTS = 3


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    due_flashcards_limit: int
    review_max_attempts: int
    study_timezone: str

    @property
    def study_tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.study_timezone)

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", "Flashcard Review Scheduler")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        try:
            due_flashcards_limit = int(os.getenv("DUE_FLASHCARDS_LIMIT", str(DEFAULT_DUE_LIMIT)))
        except ValueError as exc:  # pragma: no cover
            raise RuntimeError("DUE_FLASHCARDS_LIMIT must be an integer.") from exc
        if due_flashcards_limit < 1 or due_flashcards_limit > DEFAULT_DUE_LIMIT:
            raise RuntimeError(f"DUE_FLASHCARDS_LIMIT must be between 1 and {DEFAULT_DUE_LIMIT}.")

        try:
            review_max_attempts = int(
                os.getenv("REVIEW_MAX_ATTEMPTS", str(DEFAULT_MAX_REVIEW_ATTEMPTS))
            )
        except ValueError as exc:  # pragma: no cover
            raise RuntimeError("REVIEW_MAX_ATTEMPTS must be an integer.") from exc
        if review_max_attempts < 1:
            raise RuntimeError("REVIEW_MAX_ATTEMPTS must be a positive integer.")

        study_timezone = os.getenv("STUDY_TIMEZONE", "UTC")
        try:
            ZoneInfo(study_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise RuntimeError(f"STUDY_TIMEZONE {study_timezone!r} is not a known time zone.") from exc

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            due_flashcards_limit=due_flashcards_limit,
            review_max_attempts=review_max_attempts,
            study_timezone=study_timezone,
        )
