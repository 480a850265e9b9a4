"""Errors raised by the review use cases."""

from __future__ import annotations

from typing import Optional


class ReviewError(Exception):
    """Base class for errors surfaced to callers of the review services."""


class NotFoundError(ReviewError):
    """Referenced flashcard or material does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} {identifier} was not found.")
        self.entity = entity
        self.identifier = identifier


class UnauthorizedError(ReviewError):
    """Resource belongs to a different user than the one making the request."""

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} {identifier} does not belong to the requesting user.")
        self.entity = entity
        self.identifier = identifier


class ValidationError(ReviewError, ValueError):
    """Caller input is malformed; raised before anything is persisted."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ConcurrentReviewError(ReviewError):
    """The flashcard kept changing underneath the review until retries ran out."""

    def __init__(self, flashcard_id: object, attempts: int) -> None:
        super().__init__(
            f"Flashcard {flashcard_id} was modified concurrently; gave up after {attempts} attempts."
        )
        self.flashcard_id = flashcard_id
        self.attempts = attempts
