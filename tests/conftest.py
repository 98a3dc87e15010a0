"""Общие фикстуры для всех тестов.

Этот файл содержит pytest-фикстуры, которые используются во всех тестах:
- Тестовая БД SQLite в памяти (для изоляции тестов)
- Асинхронные сессии SQLAlchemy
- Фабрики тестовых данных (пользователь, модели, токен доступа)
"""

from collections.abc import AsyncGenerator
from decimal import Decimal
from typing import Any

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.db.models import AccessGrant, AIModel, User
from src.db.models_base import Base


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[Any, None]:
    """Создать тестовый движок SQLAlchemy.

    Использует SQLite в памяти (:memory:) для полной изоляции тестов.
    StaticPool — все сессии теста работают с одним соединением
    (иначе у каждого соединения была бы своя пустая БД).

    Yields:
        Асинхронный движок SQLAlchemy для тестовой БД.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: Any) -> AsyncGenerator[AsyncSession, None]:
    """Создать асинхронную сессию БД для теста.

    expire_on_commit=False — как в src.db.base: объекты остаются
    доступны после commit без повторной загрузки.

    Args:
        test_engine: Тестовый движок SQLAlchemy из фикстуры test_engine.

    Yields:
        Асинхронная сессия для работы с тестовой БД.
    """
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Создать тестового пользователя с балансом 100 ₽.

    Returns:
        Пользователь с telegram_id=123456789.
    """
    user = User(telegram_id=123456789, name="Test", balance=Decimal(100))
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def text_model(db_session: AsyncSession) -> AIModel:
    """Текстовая модель: 0.10 / 0.40 USD за 1M токенов."""
    model = AIModel(
        display_name="GPT-4.1 nano",
        request_name="openai/gpt-4.1-nano",
        provider="openrouter",
        modalities=["text_to_text", "image_to_text"],
        input_price_usd=Decimal("0.10"),
        output_price_usd=Decimal("0.40"),
    )
    db_session.add(model)
    await db_session.commit()
    await db_session.refresh(model)
    return model


@pytest_asyncio.fixture
async def image_model(db_session: AsyncSession) -> AIModel:
    """Модель генерации изображений (только text_to_image)."""
    model = AIModel(
        display_name="Nano Banana",
        request_name="google/gemini-2.5-flash-image",
        provider="openrouter",
        modalities=["text_to_image"],
        input_price_usd=Decimal("0.30"),
        output_price_usd=Decimal("30"),
    )
    db_session.add(model)
    await db_session.commit()
    await db_session.refresh(model)
    return model


@pytest_asyncio.fixture
async def text_grant(
    db_session: AsyncSession, test_user: User, text_model: AIModel
) -> AccessGrant:
    """Токен доступа тестового пользователя к текстовой модели."""
    grant = AccessGrant(
        user_id=test_user.id,
        model_id=text_model.id,
        telegram_id=test_user.telegram_id,
        token="TextToken123456",
    )
    db_session.add(grant)
    await db_session.commit()
    await db_session.refresh(grant)
    return grant


@pytest_asyncio.fixture
async def image_grant(
    db_session: AsyncSession, test_user: User, image_model: AIModel
) -> AccessGrant:
    """Токен доступа тестового пользователя к модели изображений."""
    grant = AccessGrant(
        user_id=test_user.id,
        model_id=image_model.id,
        telegram_id=test_user.telegram_id,
        token="ImageToken12345",
    )
    db_session.add(grant)
    await db_session.commit()
    await db_session.refresh(grant)
    return grant
