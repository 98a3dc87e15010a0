"""Модель пользователя.

Хранит пользователей Telegram, которые вошли в Mini App (/enter).
Все остальные данные (токены доступа, запросы, транзакции)
связаны с пользователем.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column
from typing_extensions import override

from src.db.models_base import Base

# Точность денежных сумм в рублях: 3 знака после запятой
MONEY = Numeric(14, 3)


class User(Base):
    """Пользователь сервиса.

    Attributes:
        id: Внутренний ID в нашей БД (автоинкремент).
        telegram_id: ID пользователя в Telegram (tlgid). BigInteger, потому что
            Telegram ID может быть больше 2^31.
        name: Имя пользователя (из Mini App). Может быть None.
        balance: Баланс в рублях. Может уйти в минус — списание
            происходит после выполнения запроса, по фактической стоимости.
        created_at: Дата первого входа.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # unique=True — два пользователя не могут иметь одинаковый telegram_id
    # index=True — это основной ключ поиска во всех эндпоинтах
    telegram_id: Mapped[int] = mapped_column(
        BigInteger,
        unique=True,
        index=True,
        nullable=False,
    )

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Баланс меняется ТОЛЬКО атомарным UPDATE (см. UserRepository.change_balance)
    balance: Mapped[Decimal] = mapped_column(
        MONEY,
        default=Decimal(0),
        server_default="0",
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<User(id={self.id}, telegram_id={self.telegram_id}, "
            f"balance={self.balance})>"
        )
