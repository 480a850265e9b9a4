"""Bootstrap logic for wiring the review services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.settings import AppSettings
from src.db import get_session_factory, run_migrations_if_needed
from src.db.flashcards import DatabaseFlashcardStore, DatabaseMaterialStore
from src.db.reviews import DatabaseFlashcardReviewStore
from src.db.study_sessions import DatabaseStudySessionStore
from src.review.service import (
    DueFlashcardsService,
    FlashcardHistoryService,
    MaterialFlashcardsService,
    ReviewFlashcardService,
)
from src.review.statistics import StatisticsService


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewServices:
    """Every use case exposed to callers, sharing one set of stores."""

    review: ReviewFlashcardService
    due: DueFlashcardsService
    history: FlashcardHistoryService
    material_flashcards: MaterialFlashcardsService
    statistics: StatisticsService


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def build_services(
    settings: AppSettings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> ReviewServices:
    """Construct the services with explicit store injection."""
    if session_factory is None:
        session_factory = get_session_factory()

    flashcards = DatabaseFlashcardStore()
    materials = DatabaseMaterialStore()
    reviews = DatabaseFlashcardReviewStore()
    study_sessions = DatabaseStudySessionStore(settings.study_tzinfo)

    return ReviewServices(
        review=ReviewFlashcardService(
            session_factory,
            flashcards,
            materials,
            reviews,
            study_sessions,
            max_attempts=settings.review_max_attempts,
        ),
        due=DueFlashcardsService(session_factory, flashcards, limit=settings.due_flashcards_limit),
        history=FlashcardHistoryService(session_factory, flashcards, materials, reviews),
        material_flashcards=MaterialFlashcardsService(session_factory, materials, flashcards),
        statistics=StatisticsService(
            session_factory,
            flashcards,
            materials,
            reviews,
            study_sessions,
            study_timezone=settings.study_tzinfo,
        ),
    )


def bootstrap(settings: AppSettings) -> ReviewServices:
    """Prepare logging and the database schema, then return ready services."""
    _configure_logging(settings.log_level)

    try:
        run_migrations_if_needed()
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    services = build_services(settings)
    LOGGER.info(
        "%s is ready in %s mode (due limit %s, study timezone %s).",
        settings.app_name,
        settings.app_env,
        settings.due_flashcards_limit,
        settings.study_timezone,
    )
    return services
