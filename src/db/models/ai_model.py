"""Модель AI-модели (описание модели из каталога).

Каталог моделей наполняется оператором через POST /createAiModel.
Пользователь выбирает модель в Mini App и получает токен доступа
(AccessGrant), с которым дальше обращается к POST /request.

Цены провайдера указываются в USD за 1 млн токенов — так их публикуют
OpenRouter и OpenAI. Итоговая стоимость в рублях считается в момент
расчёта запроса по актуальному курсу (см. BillingLedger).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column
from typing_extensions import override

from src.db.models_base import Base

# Цена за 1M токенов в USD (у дешёвых моделей бывают доли цента)
USD_PRICE = Numeric(14, 6)


class AIModel(Base):
    """AI-модель, доступная пользователям.

    Attributes:
        id: Внутренний ID модели.
        display_name: Название для пользователя ("GPT-4o mini").
        request_name: Имя модели у провайдера ("openai/gpt-4o-mini").
        provider: Ключ провайдера в реестре (openrouter, routerai, openai).
        modalities: Непустой список поддерживаемых типов запроса
            (text_to_text, text_to_image, image_to_image, image_to_text).
        input_price_usd: Цена входных токенов, USD за 1M.
        output_price_usd: Цена выходных токенов, USD за 1M.
        input_price_rub: Справочная цена входных токенов в рублях (для витрины).
        output_price_rub: Справочная цена выходных токенов в рублях (для витрины).
        path: Путь страницы модели в Mini App.
        created_at: Дата добавления модели.
    """

    __tablename__ = "ai_models"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    request_name: Mapped[str] = mapped_column(String(255), nullable=False)

    provider: Mapped[str] = mapped_column(
        String(50),
        default="openrouter",
        server_default="openrouter",
        nullable=False,
    )

    # Множество модальностей хранится списком строк
    modalities: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    input_price_usd: Mapped[Decimal] = mapped_column(USD_PRICE, nullable=False)
    output_price_usd: Mapped[Decimal] = mapped_column(USD_PRICE, nullable=False)

    input_price_rub: Mapped[Decimal | None] = mapped_column(
        Numeric(14, 3), nullable=True
    )
    output_price_rub: Mapped[Decimal | None] = mapped_column(
        Numeric(14, 3), nullable=True
    )

    path: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<AIModel(id={self.id}, request_name={self.request_name}, "
            f"provider={self.provider}, modalities={self.modalities})>"
        )
