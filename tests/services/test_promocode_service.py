"""Тесты для активации промокодов (PromocodeService)."""

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    PromocodeAlreadyUsedError,
    PromocodeNotFoundError,
    UserNotFoundError,
)
from src.db.models import User
from src.db.models.promocode import PromocodeRedemption
from src.db.models.transaction import Transaction, TransactionType
from src.db.repositories.user_repo import UserRepository
from src.services.promocode_service import PromocodeService


@pytest.mark.asyncio
async def test_redeem_credits_balance(db_session: AsyncSession, test_user: User) -> None:
    """Тест: активация промокода начисляет сумму и пишет транзакцию."""
    # Arrange
    service = PromocodeService(db_session)
    await service.create("WELCOME", Decimal("50"))

    # Act
    result = await service.redeem(test_user.telegram_id, "WELCOME")

    # Assert
    assert result.code == "WELCOME"
    assert result.amount == Decimal("50")
    assert result.balance_after == Decimal("150.000")

    user = await UserRepository(db_session).get_by_telegram_id(test_user.telegram_id)
    assert user is not None
    assert user.balance == Decimal("150.000")

    transaction = (await db_session.execute(select(Transaction))).scalar_one()
    assert transaction.type == TransactionType.PROMOCODE
    assert transaction.description == "Промокод WELCOME"


@pytest.mark.asyncio
async def test_redeem_twice_is_rejected(db_session: AsyncSession, test_user: User) -> None:
    """Тест: повторная активация тем же пользователем → PromocodeAlreadyUsedError."""
    # Arrange
    service = PromocodeService(db_session)
    await service.create("ONCE", Decimal("10"))
    await service.redeem(test_user.telegram_id, "ONCE")

    # Act
    with pytest.raises(PromocodeAlreadyUsedError):
        await service.redeem(test_user.telegram_id, "ONCE")

    # Assert: начислено один раз
    user = await UserRepository(db_session).get_by_telegram_id(test_user.telegram_id)
    assert user is not None
    assert user.balance == Decimal("110.000")
    redemptions = (await db_session.execute(select(PromocodeRedemption))).scalars().all()
    assert len(redemptions) == 1


@pytest.mark.asyncio
async def test_same_code_for_different_users(db_session: AsyncSession, test_user: User) -> None:
    """Тест: один код могут активировать разные пользователи."""
    # Arrange
    service = PromocodeService(db_session)
    await service.create("SHARED", Decimal("5"))
    other, _ = await UserRepository(db_session).get_or_create(555, "Other")

    # Act
    await service.redeem(test_user.telegram_id, "SHARED")
    result = await service.redeem(other.telegram_id, "SHARED")

    # Assert
    assert result.balance_after == Decimal("5.000")


@pytest.mark.asyncio
async def test_unknown_code(db_session: AsyncSession, test_user: User) -> None:
    """Тест: несуществующий код → PromocodeNotFoundError."""
    service = PromocodeService(db_session)

    with pytest.raises(PromocodeNotFoundError):
        await service.redeem(test_user.telegram_id, "NOPE")


@pytest.mark.asyncio
async def test_inactive_code(db_session: AsyncSession, test_user: User) -> None:
    """Тест: выключенный код не активируется."""
    service = PromocodeService(db_session)
    await service.create("OFF", Decimal("10"), is_active=False)

    with pytest.raises(PromocodeNotFoundError):
        await service.redeem(test_user.telegram_id, "OFF")


@pytest.mark.asyncio
async def test_unknown_user(db_session: AsyncSession) -> None:
    """Тест: пользователь не найден → UserNotFoundError."""
    service = PromocodeService(db_session)
    await service.create("WELCOME", Decimal("50"))

    with pytest.raises(UserNotFoundError):
        await service.redeem(404, "WELCOME")
