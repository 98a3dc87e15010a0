"""Репозиторий каталога AI-моделей."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.ai_model import AIModel


class AIModelRepository:
    """Репозиторий для работы с таблицей ai_models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, model_id: int) -> AIModel | None:
        """Найти модель по ID."""
        return await self._session.get(AIModel, model_id)

    async def list_all(self) -> list[AIModel]:
        """Получить все модели каталога (в порядке добавления)."""
        result = await self._session.execute(select(AIModel).order_by(AIModel.id))
        return list(result.scalars().all())

    async def create(
        self,
        *,
        display_name: str,
        request_name: str,
        modalities: list[str],
        input_price_usd: Decimal,
        output_price_usd: Decimal,
        provider: str = "openrouter",
        input_price_rub: Decimal | None = None,
        output_price_rub: Decimal | None = None,
        path: str | None = None,
    ) -> AIModel:
        """Добавить модель в каталог.

        Args:
            display_name: Название для пользователя.
            request_name: Имя модели у провайдера.
            modalities: Поддерживаемые типы запроса (непустой список).
            input_price_usd: Цена входных токенов, USD за 1M.
            output_price_usd: Цена выходных токенов, USD за 1M.
            provider: Ключ провайдера в реестре.
            input_price_rub: Справочная цена входных токенов в рублях.
            output_price_rub: Справочная цена выходных токенов в рублях.
            path: Путь страницы модели в Mini App.

        Returns:
            Созданная модель.

        Raises:
            ValueError: Пустой список модальностей.
        """
        if not modalities:
            raise ValueError("Модель должна поддерживать хотя бы одну модальность")

        model = AIModel(
            display_name=display_name,
            request_name=request_name,
            provider=provider,
            # dict.fromkeys — убираем дубли, сохраняя порядок
            modalities=list(dict.fromkeys(modalities)),
            input_price_usd=input_price_usd,
            output_price_usd=output_price_usd,
            input_price_rub=input_price_rub,
            output_price_rub=output_price_rub,
            path=path,
        )
        self._session.add(model)
        await self._session.commit()
        await self._session.refresh(model)
        return model
