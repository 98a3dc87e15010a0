"""Репозиторий промокодов и их активаций."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.promocode import Promocode, PromocodeRedemption


class PromocodeRepository:
    """Репозиторий для работы с таблицами promocodes и promocode_redemptions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_active(self, code: str) -> Promocode | None:
        """Найти активный промокод по коду.

        Returns:
            Promocode или None, если код не существует или выключен.
        """
        stmt = select(Promocode).where(
            Promocode.code == code,
            Promocode.is_active.is_(True),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self, code: str, amount: Decimal, is_active: bool = True
    ) -> Promocode:
        """Создать промокод."""
        promocode = Promocode(code=code, amount=amount, is_active=is_active)
        self._session.add(promocode)
        await self._session.commit()
        await self._session.refresh(promocode)
        return promocode

    async def has_redemption(self, user_id: int, promocode_id: int) -> bool:
        """Проверить, активировал ли пользователь промокод."""
        stmt = select(PromocodeRedemption.id).where(
            PromocodeRedemption.user_id == user_id,
            PromocodeRedemption.promocode_id == promocode_id,
        )
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def add_redemption(
        self,
        *,
        user_id: int,
        telegram_id: int,
        promocode: Promocode,
    ) -> PromocodeRedemption:
        """Записать активацию промокода (без commit).

        flush сразу отправляет INSERT — при повторной активации
        уникальное ограничение выбросит IntegrityError до начисления.
        """
        redemption = PromocodeRedemption(
            user_id=user_id,
            telegram_id=telegram_id,
            promocode_id=promocode.id,
            amount_granted=promocode.amount,
        )
        self._session.add(redemption)
        await self._session.flush()
        return redemption
