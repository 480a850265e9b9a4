from __future__ import annotations

import uuid

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from src.db import Base, Flashcard
from src.db.flashcards import DatabaseFlashcardStore, DatabaseMaterialStore, FlashcardPayload


async def _build_factory(url: str):
    engine = create_async_engine(url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker:
    engine, factory = await _build_factory("sqlite+aiosqlite:///:memory:")
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def file_session_factory(tmp_path) -> async_sessionmaker:
    """File-backed database so that sessions get independent connections."""
    engine, factory = await _build_factory(f"sqlite+aiosqlite:///{tmp_path / 'reviews.db'}")
    try:
        yield factory
    finally:
        await engine.dispose()


async def _seed_material(
    factory: async_sessionmaker,
    owner_id: uuid.UUID,
    questions: list[str],
    title: str = "Biology",
) -> tuple[uuid.UUID, list[Flashcard]]:
    materials = DatabaseMaterialStore()
    flashcards = DatabaseFlashcardStore()
    async with factory() as session:
        async with session.begin():
            material = await materials.create(
                session,
                owner_id,
                title,
                "Lecture notes",
                [FlashcardPayload(question=q, answer=f"Answer to {q}") for q in questions],
            )
        stored = await flashcards.list_by_material(session, material.id)
    by_question = {card.question: card for card in stored}
    return material.id, [by_question[q] for q in questions]


@pytest_asyncio.fixture
async def seed_material():
    """Create a material with one flashcard per question; cards come back in question order."""
    return _seed_material
