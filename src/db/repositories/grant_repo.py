"""Репозиторий токенов доступа к моделям (выбранные пользователем модели).

Токен — 15 случайных букв и цифр из криптографически стойкого
генератора (secrets). Уникальность проверяет ограничение БД.
"""

import secrets
import string

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.access_grant import TOKEN_LENGTH, AccessGrant
from src.db.models.ai_model import AIModel
from src.db.models.user import User
from src.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits

# Сколько раз пробуем сгенерировать токен при совпадении (практически невозможно)
TOKEN_GENERATION_ATTEMPTS = 3


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Сгенерировать непрозрачный токен доступа."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


class GrantRepository:
    """Репозиторий для работы с таблицей access_grants."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_token(self, token: str) -> AccessGrant | None:
        """Найти токен доступа (вместе с моделью).

        Args:
            token: Значение токена из заголовка Authorization.

        Returns:
            AccessGrant или None, если токен неизвестен.
        """
        # populate_existing — модель подгружается и для токена из identity map
        stmt = (
            select(AccessGrant)
            .where(AccessGrant.token == token)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, grant_id: int) -> AccessGrant | None:
        """Найти токен по внутреннему ID."""
        return await self._session.get(AccessGrant, grant_id, populate_existing=True)

    async def get_for_user_and_model(
        self, user_id: int, model_id: int
    ) -> AccessGrant | None:
        """Найти токен пользователя к конкретной модели."""
        stmt = select(AccessGrant).where(
            AccessGrant.user_id == user_id,
            AccessGrant.model_id == model_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_telegram_id(self, telegram_id: int) -> list[AccessGrant]:
        """Получить все выбранные пользователем модели (с моделями)."""
        stmt = (
            select(AccessGrant)
            .where(AccessGrant.telegram_id == telegram_id)
            .order_by(AccessGrant.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_or_create(
        self, user: User, model: AIModel
    ) -> tuple[AccessGrant, bool]:
        """Выдать токен к модели или вернуть существующий.

        Для пары (пользователь, модель) токен один — повторный выбор
        возвращает существующий.

        Returns:
            Кортеж (grant, created).
        """
        # rollback() expire-ит объекты сессии — значения берём заранее
        user_id, telegram_id, model_id = user.id, user.telegram_id, model.id

        existing = await self.get_for_user_and_model(user_id, model_id)
        if existing is not None:
            return existing, False

        for attempt in range(1, TOKEN_GENERATION_ATTEMPTS + 1):
            grant = AccessGrant(
                user_id=user_id,
                model_id=model_id,
                telegram_id=telegram_id,
                token=generate_token(),
            )
            self._session.add(grant)
            try:
                await self._session.commit()
            except IntegrityError:
                await self._session.rollback()
                # Параллельный запрос мог уже выдать токен этой паре
                existing = await self.get_for_user_and_model(user_id, model_id)
                if existing is not None:
                    return existing, False
                logger.warning(
                    "Совпадение токена доступа, повтор: user_id=%d, попытка %d",
                    user_id,
                    attempt,
                )
                continue

            await self._session.refresh(grant)
            return grant, True

        raise RuntimeError(
            f"Не удалось выдать токен: user_id={user_id}, model_id={model_id}"
        )

    async def delete(self, grant: AccessGrant) -> None:
        """Удалить токен (пользователь убрал модель из выбранных)."""
        await self._session.delete(grant)
        await self._session.commit()
