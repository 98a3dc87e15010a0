"""Базовый адаптер для AI-провайдеров.

Этот модуль определяет абстрактный интерфейс, который должны реализовать
все AI-провайдеры. Это позволяет:
- Единообразно работать с разными провайдерами (OpenRouter, RouterAI, OpenAI)
- Легко добавлять новые провайдеры без изменения логики диспетчера

Адаптер НЕ разбирает ответ провайдера: он возвращает сырой ответ
(словарь в формате chat completions), а извлечением результата
занимается ResponseExtractor. Так один и тот же разбор работает
для любого OpenAI-совместимого провайдера.

Паттерн: Adapter (GoF)
"""

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any


class Modality(StrEnum):
    """Типы запроса к модели (модальности).

    Модель поддерживает непустое множество модальностей
    (AIModel.modalities). Запрос с модальностью вне этого множества
    отклоняется до обращения к провайдеру.
    """

    # Вход: текст. Выход: текст.
    TEXT_TO_TEXT = "text_to_text"

    # Вход: текстовое описание. Выход: изображение.
    TEXT_TO_IMAGE = "text_to_image"

    # Вход: изображение + текст с описанием изменений. Выход: изображение.
    IMAGE_TO_IMAGE = "image_to_image"

    # Вход: изображение + вопрос. Выход: текст.
    IMAGE_TO_TEXT = "image_to_text"


class BaseProviderAdapter(ABC):
    """Абстрактный базовый класс для AI-провайдеров.

    Для добавления нового провайдера:
    1. Создайте класс, наследующий BaseProviderAdapter
    2. Реализуйте provider_name и complete()
    3. Зарегистрируйте фабрику через register_provider()

    Пример:
        class MyProviderAdapter(BaseProviderAdapter):
            @property
            def provider_name(self) -> str:
                return "my_provider"

            async def complete(self, model_id, messages, **kwargs):
                response = await self._client.chat(model=model_id, messages=messages)
                return response.json()
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Название провайдера (для логов и ошибок).

        Примеры: "openrouter", "routerai", "openai".
        """

    @abstractmethod
    async def complete(
        self,
        model_id: str,
        messages: list[dict[str, Any]],
        *,
        modalities: list[str] | None = None,
        image_config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Выполнить один вызов chat completions.

        Args:
            model_id: Идентификатор модели на стороне провайдера.
                Например: "openai/gpt-4o-mini", "google/gemini-2.5-flash-image".
            messages: Сообщения в формате OpenAI (content — строка
                или список частей text/image_url).
            modalities: Желаемые модальности ответа (["image", "text"]
                для генерации изображений).
            image_config: Параметры изображения ({"aspect_ratio": "16:9"}).

        Returns:
            Сырой ответ провайдера в виде словаря.

        Raises:
            ProviderCallFailedError: Сетевая ошибка, таймаут или ошибка API.
        """

    async def aclose(self) -> None:
        """Закрыть HTTP-клиенты адаптера.

        По умолчанию ничего не делает. Переопределите, если адаптер
        держит собственные соединения.
        """
        return None
