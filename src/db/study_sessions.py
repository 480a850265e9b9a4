"""Daily study-session counters and the atomic upsert that maintains them."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields
from datetime import date, datetime, timezone, tzinfo
from typing import Optional, Union

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from . import StudySession


_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True, slots=True)
class StudySessionDelta:
    """Amounts to add to a day's counters."""

    flashcards_studied: int = 0
    flashcards_correct: int = 0
    quizzes_completed: int = 0
    quizzes_correct: int = 0

    def __post_init__(self) -> None:
        for field in fields(self):
            if getattr(self, field.name) < 0:
                raise ValueError(f"{field.name} cannot be negative.")

    def as_values(self) -> dict[str, int]:
        return {field.name: getattr(self, field.name) for field in fields(self)}


def study_day(moment: Union[date, datetime], tz: tzinfo = timezone.utc) -> date:
    """Collapse a timestamp to the calendar day it falls on in ``tz``."""
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(tz).date()
    return moment


class DatabaseStudySessionStore:
    """Keeps one counter row per (user, day)."""

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    async def upsert(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        day: Union[date, datetime],
        delta: StudySessionDelta,
    ) -> StudySession:
        """Create the day's row or add ``delta`` to it in a single statement."""
        dialect_name = session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect_name)
        if insert is None:
            raise RuntimeError(f"Study session upsert is not supported on {dialect_name!r}.")

        values = delta.as_values()
        stmt = insert(StudySession).values(
            user_id=user_id,
            study_date=study_day(day, self._tz),
            **values,
        )
        table = StudySession.__table__
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.study_date],
            set_={name: table.c[name] + stmt.excluded[name] for name in values},
        ).returning(StudySession)

        result = await session.scalars(stmt, execution_options={"populate_existing": True})
        return result.one()

    async def get(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        day: Union[date, datetime],
    ) -> Optional[StudySession]:
        stmt = select(StudySession).where(
            StudySession.user_id == user_id,
            StudySession.study_date == study_day(day, self._tz),
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_since(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        since: date,
    ) -> list[StudySession]:
        """Return the user's rows from ``since`` onwards, oldest first."""
        stmt = (
            select(StudySession)
            .where(StudySession.user_id == user_id, StudySession.study_date >= since)
            .order_by(StudySession.study_date)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def count_active_days(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(StudySession)
            .where(
                StudySession.user_id == user_id,
                (StudySession.flashcards_studied + StudySession.quizzes_completed) > 0,
            )
        )
        return (await session.execute(stmt)).scalar_one()
