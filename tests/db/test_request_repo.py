"""Тесты для RequestRepository и TransactionRepository."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import UserNotFoundError
from src.db.models import AIModel, User
from src.db.models.transaction import TransactionType
from src.db.repositories.ai_model_repo import AIModelRepository
from src.db.repositories.request_repo import RequestRepository
from src.db.repositories.transaction_repo import TransactionRepository

# ==============================================================================
# ЖУРНАЛ ЗАПРОСОВ
# ==============================================================================


@pytest.mark.asyncio
async def test_create_pending_entry(
    db_session: AsyncSession, test_user: User, text_model: AIModel
) -> None:
    """Тест: новая запись ожидает расчёта, токенов и стоимости ещё нет."""
    repo = RequestRepository(db_session)

    entry = await repo.create_pending(
        model_id=text_model.id,
        owner_id=test_user.id,
        owner_telegram_id=test_user.telegram_id,
        input_text="Привет",
        modality="text_to_text",
    )

    assert entry.id is not None
    assert entry.is_operated is False
    assert entry.is_authorised is True
    assert entry.input_tokens is None
    assert entry.final_cost is None


@pytest.mark.asyncio
async def test_mark_failed_keeps_entry_pending(
    db_session: AsyncSession, test_user: User, text_model: AIModel
) -> None:
    """Тест: бизнес-ошибка пишется в note, запись остаётся нерассчитанной."""
    repo = RequestRepository(db_session)
    entry = await repo.create_pending(
        model_id=text_model.id,
        owner_id=test_user.id,
        owner_telegram_id=test_user.telegram_id,
        input_text="кот",
        modality="text_to_image",
    )

    await repo.mark_failed(entry, "Модель не поддерживает тип запроса")

    assert entry.note == "Модель не поддерживает тип запроса"
    assert entry.is_operated is False


# ==============================================================================
# ТРАНЗАКЦИИ
# ==============================================================================


@pytest.mark.asyncio
async def test_apply_records_balance_after(
    db_session: AsyncSession, test_user: User
) -> None:
    """Тест: транзакция хранит баланс после изменения."""
    repo = TransactionRepository(db_session)

    first = await repo.apply(
        test_user.telegram_id, TransactionType.PAYMENT, Decimal(50), "Пополнение"
    )
    second = await repo.apply(
        test_user.telegram_id, TransactionType.REQUEST_CHARGE, Decimal("-0.5"), "Запрос #1"
    )

    assert first.balance_after == Decimal("150.000")
    assert second.balance_after == Decimal("149.500")
    assert first.user_id == second.user_id == test_user.id
    assert second.amount == Decimal("-0.5")


@pytest.mark.asyncio
async def test_apply_unknown_user(db_session: AsyncSession) -> None:
    """Тест: пользователь не найден → UserNotFoundError, транзакции нет."""
    repo = TransactionRepository(db_session)

    with pytest.raises(UserNotFoundError):
        await repo.apply(404, TransactionType.PAYMENT, Decimal(1), "Пополнение")


# ==============================================================================
# КАТАЛОГ МОДЕЛЕЙ
# ==============================================================================


@pytest.mark.asyncio
async def test_create_model_deduplicates_modalities(db_session: AsyncSession) -> None:
    """Тест: повторяющиеся модальности сохраняются один раз."""
    repo = AIModelRepository(db_session)

    model = await repo.create(
        display_name="Vision",
        request_name="openai/gpt-4o",
        modalities=["text_to_text", "image_to_text", "text_to_text"],
        input_price_usd=Decimal("2.5"),
        output_price_usd=Decimal(10),
    )

    assert model.modalities == ["text_to_text", "image_to_text"]
    assert model.provider == "openrouter"
    assert await repo.list_all() == [model]


@pytest.mark.asyncio
async def test_create_model_without_modalities(db_session: AsyncSession) -> None:
    """Тест: модель без модальностей не создаётся."""
    repo = AIModelRepository(db_session)

    with pytest.raises(ValueError):
        await repo.create(
            display_name="Empty",
            request_name="x/y",
            modalities=[],
            input_price_usd=Decimal(1),
            output_price_usd=Decimal(1),
        )
