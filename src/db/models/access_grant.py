"""Модель токена доступа пользователя к модели.

Когда пользователь выбирает модель в Mini App (/chooseAiModel),
создаётся AccessGrant со случайным токеном. Этим токеном клиент
авторизует POST /request (заголовок Authorization: Bearer <token>).
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing_extensions import override

from src.db.models_base import Base

if TYPE_CHECKING:
    from src.db.models.ai_model import AIModel

# Длина токена доступа
TOKEN_LENGTH = 15


class AccessGrant(Base):
    """Выбранная пользователем модель с токеном доступа.

    Для каждой пары (пользователь, модель) существует не более одного токена.

    Attributes:
        id: Внутренний ID.
        user_id: Владелец токена (FK → users.id).
        model_id: Модель (FK → ai_models.id).
        telegram_id: Telegram ID владельца (дублируется для быстрых выборок).
        token: Непрозрачный токен из 15 букв и цифр.
        created_at: Когда модель была выбрана.
        model: Связь с AIModel.
    """

    __tablename__ = "access_grants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    model_id: Mapped[int] = mapped_column(
        ForeignKey("ai_models.id", ondelete="CASCADE"),
        nullable=False,
    )

    telegram_id: Mapped[int] = mapped_column(BigInteger, index=True, nullable=False)

    token: Mapped[str] = mapped_column(
        String(TOKEN_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    # selectin — модель нужна при каждом обращении к токену
    model: Mapped["AIModel"] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "model_id", name="uq_access_grants_user_model"),
    )

    @override
    def __repr__(self) -> str:
        """Строковое представление для отладки."""
        return (
            f"<AccessGrant(id={self.id}, user_id={self.user_id}, "
            f"model_id={self.model_id})>"
        )
