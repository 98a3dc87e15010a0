"""Модель транзакции (журнал изменений баланса).

Транзакция — это запись о любом изменении баланса пользователя:
- Списание за выполненный запрос к модели
- Пополнение через платёжный webhook
- Начисление по промокоду

Баланс пользователя хранится в User.balance (для быстрого доступа),
а журнал позволяет восстановить историю любого изменения.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from typing_extensions import override

from src.db.models.user import MONEY
from src.db.models_base import Base


class TransactionType(StrEnum):
    """Тип транзакции — причина изменения баланса.

    Значения:
        REQUEST_CHARGE: Списание за запрос к модели (одна на каждую
            рассчитанную запись запроса, кроме пропущенных).
        PAYMENT: Пополнение через платёжный webhook.
        PROMOCODE: Начисление по промокоду.
    """

    REQUEST_CHARGE = "request_charge"
    PAYMENT = "payment"
    PROMOCODE = "promocode"


class Transaction(Base):
    """Транзакция — запись об изменении баланса пользователя.

    Паттерн "леджер": транзакции никогда не изменяются и не удаляются.

    Attributes:
        id: Уникальный ID транзакции.
        user_id: ID пользователя (FK → users.id).
        type: Тип транзакции (TransactionType).
        amount: Сумма. Положительная = начисление, отрицательная = списание.
        balance_after: Баланс пользователя ПОСЛЕ этой транзакции.
        description: Человекочитаемое описание.
        metadata_json: JSON с дополнительными данными (request_id, rate, ...).
        created_at: Дата и время создания.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    type: Mapped[str] = mapped_column(String(50), nullable=False)

    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    balance_after: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    description: Mapped[str] = mapped_column(String(255), nullable=False)

    # Text вместо JSON — единый формат для SQLite и PostgreSQL
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_transactions_user_created", "user_id", "created_at"),
        Index("ix_transactions_user_type", "user_id", "type"),
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount={self.amount}, "
            f"balance_after={self.balance_after})>"
        )
