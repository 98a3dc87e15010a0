"""Модель записи запроса (журнал запросов к моделям).

Каждый принятый запрос (прошедший проверку токена и минимального баланса)
оставляет ровно одну запись. Запись никогда не удаляется.

Жизненный цикл:
1. Создаётся в состоянии "ожидает" (is_operated=False, токены NULL)
   ДО обращения к провайдеру
2. Переходит в "рассчитан" ровно один раз:
   - со стоимостью и списанием (is_operated=True)
   - или без списания, если провайдер не вернул usage (billing_skipped=True)
3. Если обработка завершилась бизнес-ошибкой — текст ошибки в note,
   запись остаётся нерассчитанной, списания нет
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column
from typing_extensions import override

from src.db.models.user import MONEY
from src.db.models_base import Base


class RequestRecord(Base):
    """Запись о запросе пользователя к модели.

    Attributes:
        id: Внутренний ID записи.
        model_id: Модель (FK → ai_models.id).
        owner_id: Владелец токена (FK → users.id).
        owner_telegram_id: Telegram ID владельца.
        input_text: Текст запроса пользователя.
        modality: Тип запроса (text_to_text, text_to_image, ...).
        is_authorised: Токен прошёл проверку.
        input_tokens: Входные токены по данным провайдера (NULL до расчёта).
        output_tokens: Выходные токены по данным провайдера (NULL до расчёта).
        input_cost_usd: Себестоимость входных токенов в USD.
        output_cost_usd: Себестоимость выходных токенов в USD.
        rate: Курс USD→RUB, использованный при расчёте.
        final_cost: Итоговая стоимость в рублях (списана с баланса).
        is_operated: Запись рассчитана.
        billing_skipped: Провайдер не вернул usage — списание не выполнялось.
        note: Текст бизнес-ошибки, если запрос не выполнен.
        created_at: Время принятия запроса.
        updated_at: Время последнего изменения записи.
    """

    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    model_id: Mapped[int] = mapped_column(
        ForeignKey("ai_models.id"),
        nullable=False,
    )

    owner_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    owner_telegram_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    input_text: Mapped[str] = mapped_column(Text, nullable=False)

    modality: Mapped[str] = mapped_column(String(32), nullable=False)

    is_authorised: Mapped[bool] = mapped_column(default=True, nullable=False)

    input_tokens: Mapped[int | None] = mapped_column(nullable=True)
    output_tokens: Mapped[int | None] = mapped_column(nullable=True)

    # Себестоимость в USD: 10 знаков, т.к. один токен стоит доли цента
    input_cost_usd: Mapped[Decimal | None] = mapped_column(
        Numeric(20, 10), nullable=True
    )
    output_cost_usd: Mapped[Decimal | None] = mapped_column(
        Numeric(20, 10), nullable=True
    )

    rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)

    final_cost: Mapped[Decimal | None] = mapped_column(MONEY, nullable=True)

    is_operated: Mapped[bool] = mapped_column(default=False, nullable=False)

    billing_skipped: Mapped[bool] = mapped_column(default=False, nullable=False)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_requests_owner_created", "owner_id", "created_at"),
        # Разбор зависших нерассчитанных записей
        Index("ix_requests_is_operated", "is_operated"),
    )

    @property
    def is_pending(self) -> bool:
        """Запись ещё не рассчитана."""
        return not self.is_operated

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<RequestRecord(id={self.id}, owner_id={self.owner_id}, "
            f"modality={self.modality}, is_operated={self.is_operated}, "
            f"final_cost={self.final_cost})>"
        )
