"""Диспетчер модальностей.

Проверяет запрос, выбирает стратегию по модальности, делает ровно один
вызов провайдера и передаёт сырой ответ в ResponseExtractor.

Порядок проверок:
1. Модальность известна (UnknownModalityError)
2. Модель поддерживает модальность (ModalityUnsupportedError)
3. Поля, обязательные для модальности (MissingRequiredFieldError,
   InvalidAspectRatioError)

Ни одна проверка не обращается к провайдеру. Провайдер вызывается
только после того, как все проверки пройдены.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from src.config.models import AIProvidersSettings
from src.config.yaml_config import GenerationTimeouts
from src.core.exceptions import (
    InvalidAspectRatioError,
    MissingRequiredFieldError,
    ModalityUnsupportedError,
    ProviderCallFailedError,
    ProviderNotAvailableError,
    UnknownModalityError,
)
from src.db.models import AIModel
from src.providers.ai import BaseProviderAdapter, Modality, ProviderRegistry, get_registry
from src.services.extraction import ExtractionResult, ResponseExtractor, ResultKind
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Допустимые форматы (соотношения сторон) для генерации изображений
ALLOWED_ASPECT_RATIOS: tuple[str, ...] = (
    "1:1",
    "2:3",
    "3:2",
    "3:4",
    "4:3",
    "4:5",
    "5:4",
    "9:16",
    "16:9",
    "21:9",
)

# Модальности ответа для моделей, генерирующих изображения
IMAGE_OUTPUT_MODALITIES = ["image", "text"]


@dataclass(frozen=True)
class ProviderCall:
    """Параметры одного вызова chat completions."""

    messages: list[dict[str, Any]]
    modalities: list[str] | None = None
    image_config: dict[str, Any] | None = None


@dataclass(frozen=True)
class DispatchResult:
    """Результат обработки запроса: извлечённый результат и токены."""

    result: ExtractionResult
    input_tokens: int = 0
    output_tokens: int = 0


# =============================================================================
# СТРАТЕГИИ МОДАЛЬНОСТЕЙ
# =============================================================================


class ModalityStrategy(ABC):
    """Стратегия обработки одной модальности."""

    result_kind: ResultKind = ResultKind.TEXT

    def validate(self, image_ref: str | None, aspect_ratio: str | None) -> None:
        """Проверить поля запроса. По умолчанию проверять нечего."""
        return None

    @abstractmethod
    def build_call(
        self, input_text: str, image_ref: str | None, aspect_ratio: str | None
    ) -> ProviderCall:
        """Собрать параметры вызова провайдера."""


def _require_image(image_ref: str | None) -> None:
    if not image_ref:
        raise MissingRequiredFieldError(
            "photo_url", "Для этого типа запроса нужно передать photo_url"
        )


def _check_aspect_ratio(aspect_ratio: str | None) -> None:
    # Формат необязателен: без него провайдер выбирает сам
    if aspect_ratio is not None and aspect_ratio not in ALLOWED_ASPECT_RATIOS:
        raise InvalidAspectRatioError(aspect_ratio, ALLOWED_ASPECT_RATIOS)


def _image_config(aspect_ratio: str | None) -> dict[str, Any] | None:
    if aspect_ratio is None:
        return None
    return {"aspect_ratio": aspect_ratio}


def _text_with_image(input_text: str, image_ref: str | None) -> list[dict[str, Any]]:
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": input_text},
                {"type": "image_url", "image_url": {"url": image_ref}},
            ],
        }
    ]


class TextToTextStrategy(ModalityStrategy):
    """Текст → текст."""

    def build_call(
        self, input_text: str, image_ref: str | None, aspect_ratio: str | None
    ) -> ProviderCall:
        return ProviderCall(messages=[{"role": "user", "content": input_text}])


class TextToImageStrategy(ModalityStrategy):
    """Текст → изображение."""

    result_kind = ResultKind.IMAGE

    def validate(self, image_ref: str | None, aspect_ratio: str | None) -> None:
        _check_aspect_ratio(aspect_ratio)

    def build_call(
        self, input_text: str, image_ref: str | None, aspect_ratio: str | None
    ) -> ProviderCall:
        return ProviderCall(
            messages=[{"role": "user", "content": input_text}],
            modalities=IMAGE_OUTPUT_MODALITIES,
            image_config=_image_config(aspect_ratio),
        )


class ImageToImageStrategy(ModalityStrategy):
    """Изображение + текст → изображение (редактирование)."""

    result_kind = ResultKind.IMAGE

    def validate(self, image_ref: str | None, aspect_ratio: str | None) -> None:
        _require_image(image_ref)
        _check_aspect_ratio(aspect_ratio)

    def build_call(
        self, input_text: str, image_ref: str | None, aspect_ratio: str | None
    ) -> ProviderCall:
        return ProviderCall(
            messages=_text_with_image(input_text, image_ref),
            modalities=IMAGE_OUTPUT_MODALITIES,
            image_config=_image_config(aspect_ratio),
        )


class ImageToTextStrategy(ModalityStrategy):
    """Изображение + вопрос → текст (vision)."""

    def validate(self, image_ref: str | None, aspect_ratio: str | None) -> None:
        _require_image(image_ref)

    def build_call(
        self, input_text: str, image_ref: str | None, aspect_ratio: str | None
    ) -> ProviderCall:
        return ProviderCall(messages=_text_with_image(input_text, image_ref))


STRATEGIES: dict[Modality, ModalityStrategy] = {
    Modality.TEXT_TO_TEXT: TextToTextStrategy(),
    Modality.TEXT_TO_IMAGE: TextToImageStrategy(),
    Modality.IMAGE_TO_IMAGE: ImageToImageStrategy(),
    Modality.IMAGE_TO_TEXT: ImageToTextStrategy(),
}


# =============================================================================
# ДИСПЕТЧЕР
# =============================================================================


def _usage_tokens(raw: dict[str, Any]) -> tuple[int, int]:
    """Токены из usage (chat completions или Responses API). Нет данных — 0."""
    usage = raw.get("usage")
    if not isinstance(usage, dict):
        return 0, 0

    input_tokens = usage.get("prompt_tokens")
    if input_tokens is None:
        input_tokens = usage.get("input_tokens")
    output_tokens = usage.get("completion_tokens")
    if output_tokens is None:
        output_tokens = usage.get("output_tokens")

    return int(input_tokens or 0), int(output_tokens or 0)


class ModalityDispatcher:
    """Проверка запроса и вызов провайдера модели.

    Один экземпляр на приложение (создаётся в lifespan). Адаптеры
    провайдеров создаются при первом обращении и переиспользуются.

    Пример использования:
        dispatcher = ModalityDispatcher(settings.ai, extractor, yaml_config.generation_timeouts)
        result = await dispatcher.dispatch(model, "text_to_text", "Привет!")
        print(result.result.value, result.input_tokens, result.output_tokens)
    """

    def __init__(
        self,
        settings: AIProvidersSettings,
        extractor: ResponseExtractor,
        timeouts: GenerationTimeouts,
        proxy_url: str | None = None,
        registry: ProviderRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._extractor = extractor
        self._timeouts = timeouts
        self._proxy_url = proxy_url
        self._registry = registry or get_registry()
        self._adapters: dict[str, BaseProviderAdapter] = {}

    def _get_adapter(self, model: AIModel) -> BaseProviderAdapter:
        adapter = self._adapters.get(model.provider)
        if adapter is not None:
            return adapter

        try:
            adapter = self._registry.create_adapter(
                model.provider,
                self._settings,
                proxy_url=self._proxy_url,
                timeout=float(self._timeouts.max_timeout),
            )
        except ProviderNotAvailableError as e:
            logger.error("Провайдер недоступен: %s", e.message)
            raise ProviderCallFailedError(
                e.message,
                provider=model.provider,
                model_id=model.request_name,
                original_error=e,
            ) from e

        self._adapters[model.provider] = adapter
        return adapter

    async def dispatch(
        self,
        model: AIModel,
        modality: str,
        input_text: str,
        image_ref: str | None = None,
        aspect_ratio: str | None = None,
    ) -> DispatchResult:
        """Обработать запрос к модели.

        Args:
            model: Модель из каталога.
            modality: Тип запроса (text_to_text, text_to_image, ...).
            input_text: Текст запроса.
            image_ref: Ссылка на входное изображение (для image_to_*).
            aspect_ratio: Формат изображения (для *_to_image).

        Returns:
            DispatchResult с результатом и количеством токенов.

        Raises:
            DispatchError: Любая бизнес-ошибка (см. src.core.exceptions).
            ProviderCallFailedError: Сетевой сбой, таймаут или ошибка API провайдера.
        """
        known = [m.value for m in Modality]
        if modality not in known:
            raise UnknownModalityError(modality, known)

        if modality not in model.modalities:
            raise ModalityUnsupportedError(modality, model.modalities)

        strategy = STRATEGIES[Modality(modality)]
        strategy.validate(image_ref, aspect_ratio)
        call = strategy.build_call(input_text, image_ref, aspect_ratio)

        adapter = self._get_adapter(model)
        timeout = (
            self._timeouts.image
            if strategy.result_kind == ResultKind.IMAGE
            else self._timeouts.text
        )

        logger.info(
            "Запрос к %s:%s (%s)", adapter.provider_name, model.request_name, modality
        )
        try:
            raw = await asyncio.wait_for(
                adapter.complete(
                    model.request_name,
                    call.messages,
                    modalities=call.modalities,
                    image_config=call.image_config,
                ),
                timeout=timeout,
            )
        except TimeoutError as e:
            logger.warning(
                "Таймаут %d сек: %s:%s", timeout, adapter.provider_name, model.request_name
            )
            raise ProviderCallFailedError(
                f"Провайдер не ответил за {timeout} сек",
                provider=adapter.provider_name,
                model_id=model.request_name,
                is_retryable=True,
                original_error=e,
            ) from e

        # base64 декодируется и пишется на диск вне event loop
        result = await asyncio.to_thread(
            self._extractor.extract, raw, strategy.result_kind
        )
        input_tokens, output_tokens = _usage_tokens(raw)

        logger.info(
            "Ответ %s:%s: tokens=%d/%d",
            adapter.provider_name,
            model.request_name,
            input_tokens,
            output_tokens,
        )
        return DispatchResult(
            result=result, input_tokens=input_tokens, output_tokens=output_tokens
        )

    async def aclose(self) -> None:
        """Закрыть клиенты всех созданных адаптеров."""
        for adapter in self._adapters.values():
            await adapter.aclose()
        self._adapters.clear()
