"""Адаптер для OpenAI-совместимого API (chat completions).

Используется для всех поддерживаемых провайдеров:
- OpenRouter (openrouter.ai) — агрегатор моделей от разных провайдеров
- RouterAI (routerai.ru) — российский сервис
- OpenAI (api.openai.com) — напрямую

Провайдеры используют один формат API, отличаются только base_url и ключом.
Генерация изображений идёт через тот же chat completions с параметром
modalities=["image", "text"] (нестандартные параметры — через extra_body).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import openai
from openai import AsyncOpenAI
from typing_extensions import override

from src.core.exceptions import ProviderCallFailedError
from src.providers.ai.base import BaseProviderAdapter
from src.providers.ai.registry import register_provider
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.config.models import AIProvidersSettings

logger = get_logger(__name__)

# Таймаут по умолчанию для HTTP-клиента (в секундах).
# Используется если диспетчер не передал таймаут из конфигурации.
DEFAULT_TIMEOUT_SECONDS = 60.0

# Ошибки SDK, после которых запрос имеет смысл повторить позже
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    openai.APIConnectionError,  # включает APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
    httpx.TransportError,
)


class OpenAIAdapter(BaseProviderAdapter):
    """Адаптер для OpenAI-совместимого API.

    Делает ровно один вызов chat completions на запрос (max_retries=0).

    Пример использования:
        adapter = OpenAIAdapter(
            api_key="sk-or-v1-...",
            base_url="https://openrouter.ai/api/v1",
            name="openrouter",
        )
        raw = await adapter.complete(
            "openai/gpt-4o-mini",
            [{"role": "user", "content": "Привет!"}],
        )
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        name: str = "openai",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        proxy_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Создать адаптер OpenAI-совместимого API.

        Args:
            api_key: API-ключ провайдера.
            base_url: URL API провайдера (None — стандартный OpenAI URL).
            name: Название провайдера для логов и ошибок.
            timeout: Таймаут запроса в секундах.
            proxy_url: URL прокси-сервера (опционально).
                Формат: http://host:port, https://host:port, socks5://host:port
            client: Готовый клиент (для тестов).
        """
        self._name = name
        self._base_url = base_url
        self._timeout = timeout
        self._proxy_url = proxy_url

        if client is not None:
            self._client = client
            return

        http_client: httpx.AsyncClient | None = None
        if proxy_url:
            logger.info("Используем прокси для %s: %s", name, proxy_url)
            http_client = httpx.AsyncClient(proxy=proxy_url, timeout=timeout)

        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    @property
    @override
    def provider_name(self) -> str:
        return self._name

    @override
    async def complete(
        self,
        model_id: str,
        messages: list[dict[str, Any]],
        *,
        modalities: list[str] | None = None,
        image_config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Выполнить вызов chat completions и вернуть сырой ответ.

        Raises:
            ProviderCallFailedError: Любая ошибка SDK или сети.
        """
        extra_body: dict[str, Any] = {}
        if modalities:
            extra_body["modalities"] = modalities
        if image_config:
            extra_body["image_config"] = image_config

        logger.debug(
            "Chat completions: provider=%s, model=%s, modalities=%s, image_config=%s",
            self._name,
            model_id,
            modalities,
            image_config,
        )

        try:
            response = await self._client.chat.completions.create(
                model=model_id,
                messages=messages,  # type: ignore[arg-type]
                extra_body=extra_body or None,
            )
        except Exception as e:
            # logging.exception() автоматически включает traceback
            logger.exception(
                "Ошибка API провайдера (provider=%s, model=%s)", self._name, model_id
            )
            raise ProviderCallFailedError(
                f"Ошибка обращения к провайдеру: {e}",
                provider=self._name,
                model_id=model_id,
                is_retryable=self._is_retryable_error(e),
                original_error=e,
            ) from e

        # Дополнительные поля (images у OpenRouter) попадают в дамп как extra
        return response.model_dump()

    @override
    async def aclose(self) -> None:
        await self._client.close()

    def _is_retryable_error(self, error: Exception) -> bool:
        """Определить, временная ли ошибка (rate limit, таймаут, 5xx).

        Args:
            error: Исключение от OpenAI SDK или httpx.

        Returns:
            True если запрос можно повторить позже.
        """
        if isinstance(error, RETRYABLE_ERRORS):
            return True

        error_message = str(error).lower()
        retryable_patterns = ("rate limit", "timeout", "502", "503", "504")
        return any(pattern in error_message for pattern in retryable_patterns)


# ==============================================================================
# ФАБРИКА АДАПТЕРОВ
# ==============================================================================


class OpenAIAdapterFactory:
    """Фабрика адаптеров для одного OpenAI-совместимого провайдера."""

    def __init__(self, name: str, base_url: str, api_key_attr: str) -> None:
        """Создать фабрику адаптеров.

        Args:
            name: Ключ провайдера (openrouter, routerai, openai).
            base_url: URL API провайдера.
            api_key_attr: Имя атрибута в AIProvidersSettings для API-ключа.
        """
        self._name = name
        self._base_url = base_url
        self._api_key_attr = api_key_attr

    def create(
        self,
        settings: AIProvidersSettings,
        proxy_url: str | None = None,
        timeout: float | None = None,
    ) -> BaseProviderAdapter | None:
        """Создать адаптер, если настроен API-ключ."""
        api_key = getattr(settings, self._api_key_attr, None)
        if api_key is None:
            return None

        return OpenAIAdapter(
            api_key=api_key.get_secret_value(),
            base_url=self._base_url,
            name=self._name,
            proxy_url=proxy_url,
            timeout=timeout or DEFAULT_TIMEOUT_SECONDS,
        )


# ==============================================================================
# РЕГИСТРАЦИЯ ПРОВАЙДЕРОВ
# ==============================================================================

# OpenRouter — агрегатор моделей, ключ: AI__OPENROUTER_API_KEY
register_provider(
    "openrouter",
    OpenAIAdapterFactory(
        name="openrouter",
        base_url="https://openrouter.ai/api/v1",
        api_key_attr="openrouter_api_key",
    ),
)

# RouterAI — URL именно routerai.ru/api/v1 (НЕ api.routerai.ru!),
# ключ: AI__ROUTERAI_API_KEY
register_provider(
    "routerai",
    OpenAIAdapterFactory(
        name="routerai",
        base_url="https://routerai.ru/api/v1",
        api_key_attr="routerai_api_key",
    ),
)

# OpenAI напрямую, ключ: AI__OPENAI_API_KEY
register_provider(
    "openai",
    OpenAIAdapterFactory(
        name="openai",
        base_url="https://api.openai.com/v1",
        api_key_attr="openai_api_key",
    ),
)
