"""Модели промокодов.

Promocode — код, который начисляет фиксированную сумму на баланс.
PromocodeRedemption — факт активации кода пользователем.
Каждый пользователь может активировать конкретный код только один раз
(уникальное ограничение в БД защищает и от одновременных запросов).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column
from typing_extensions import override

from src.db.models.user import MONEY
from src.db.models_base import Base


class Promocode(Base):
    """Промокод.

    Attributes:
        id: Внутренний ID.
        code: Сам код (уникальный).
        amount: Сумма начисления в рублях.
        is_active: Можно ли активировать код.
        created_at: Дата создания.
    """

    __tablename__ = "promocodes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    code: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )

    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<Promocode(id={self.id}, code={self.code}, "
            f"amount={self.amount}, is_active={self.is_active})>"
        )


class PromocodeRedemption(Base):
    """Активация промокода пользователем.

    Attributes:
        id: Внутренний ID.
        user_id: Пользователь (FK → users.id).
        telegram_id: Telegram ID пользователя.
        promocode_id: Промокод (FK → promocodes.id).
        amount_granted: Сколько было начислено.
        created_at: Время активации.
    """

    __tablename__ = "promocode_redemptions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    telegram_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    promocode_id: Mapped[int] = mapped_column(
        ForeignKey("promocodes.id", ondelete="CASCADE"),
        nullable=False,
    )

    amount_granted: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "promocode_id", name="uq_promocode_redemptions_user_code"
        ),
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<PromocodeRedemption(user_id={self.user_id}, "
            f"promocode_id={self.promocode_id})>"
        )
