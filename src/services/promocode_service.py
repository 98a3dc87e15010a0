"""Активация промокодов.

Каждый пользователь может активировать промокод один раз.
Повторную активацию (в том числе одновременную) отсекает уникальное
ограничение (user_id, promocode_id) в таблице promocode_redemptions.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    PromocodeAlreadyUsedError,
    PromocodeNotFoundError,
    UserNotFoundError,
)
from src.db.models.promocode import Promocode
from src.db.models.transaction import TransactionType
from src.db.repositories.promocode_repo import PromocodeRepository
from src.db.repositories.transaction_repo import TransactionRepository
from src.db.repositories.user_repo import UserRepository
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RedemptionResult:
    """Результат активации промокода."""

    code: str
    amount: Decimal
    balance_after: Decimal


class PromocodeService:
    """Сервис промокодов.

    Пример использования:
        service = PromocodeService(session)
        result = await service.redeem(telegram_id=123, code="WELCOME")
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._promocodes = PromocodeRepository(session)
        self._users = UserRepository(session)
        self._transactions = TransactionRepository(session)

    async def redeem(self, telegram_id: int, code: str) -> RedemptionResult:
        """Активировать промокод и начислить сумму на баланс.

        Args:
            telegram_id: ID пользователя в Telegram.
            code: Промокод.

        Returns:
            RedemptionResult с новым балансом.

        Raises:
            PromocodeNotFoundError: Промокода нет или он не активен.
            UserNotFoundError: Пользователь не найден.
            PromocodeAlreadyUsedError: Пользователь уже активировал промокод.
        """
        promocode = await self._promocodes.get_active(code)
        if promocode is None:
            raise PromocodeNotFoundError(code)

        user = await self._users.get_by_telegram_id(telegram_id)
        if user is None:
            raise UserNotFoundError(telegram_id)

        if await self._promocodes.has_redemption(user.id, promocode.id):
            raise PromocodeAlreadyUsedError(code, telegram_id)

        amount = promocode.amount
        try:
            await self._promocodes.add_redemption(
                user_id=user.id, telegram_id=telegram_id, promocode=promocode
            )
            transaction = await self._transactions.apply(
                telegram_id,
                TransactionType.PROMOCODE,
                amount,
                f"Промокод {code}",
                metadata={"promocode_id": promocode.id},
            )
        except IntegrityError:
            await self._session.rollback()
            logger.info(
                "Повторная активация промокода %s: telegram_id=%d", code, telegram_id
            )
            raise PromocodeAlreadyUsedError(code, telegram_id) from None

        logger.info(
            "Промокод %s активирован: telegram_id=%d, amount=%s",
            code,
            telegram_id,
            amount,
        )
        return RedemptionResult(
            code=code, amount=amount, balance_after=transaction.balance_after
        )

    async def create(
        self, code: str, amount: Decimal, is_active: bool = True
    ) -> Promocode:
        """Создать промокод (операторская операция)."""
        promocode = await self._promocodes.create(code, amount, is_active)
        logger.info("Создан промокод %s на %s", code, amount)
        return promocode
