"""Курс USD→RUB от ЦБ РФ.

Источник — JSON-зеркало ежедневных курсов ЦБ:
    https://www.cbr-xml-daily.ru/daily_json.js

Формат ответа (сокращённо):
    {"Date": "...", "Valute": {"USD": {"Value": 92.5153, ...}, ...}}

Курс запрашивается заново при каждом расчёте запроса (без кеша и повторов).
Любой сбой источника НЕ прерывает расчёт: используется резервный курс
из config.yaml (billing.fallback_rate), а в лог пишется предупреждение.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

import httpx

from src.config.yaml_config import DEFAULT_RATE_SOURCE_URL
from src.core.exceptions import RateSourceUnavailableError
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExchangeRate:
    """Курс USD→RUB.

    Attributes:
        value: Сколько рублей за 1 USD.
        is_fallback: True — источник недоступен, использован резервный курс.
    """

    value: Decimal
    is_fallback: bool = False


class RateProvider(Protocol):
    """Протокол источника курса (для подмены в тестах)."""

    async def current_rate(self) -> ExchangeRate:
        """Получить текущий курс. Никогда не выбрасывает исключений."""
        ...


class CbrRateProvider:
    """Источник курса USD→RUB на основе JSON ЦБ РФ.

    Пример использования:
        provider = CbrRateProvider(fallback_rate=Decimal(100))
        rate = await provider.current_rate()
        if rate.is_fallback:
            ...  # курс резервный
    """

    def __init__(
        self,
        url: str = DEFAULT_RATE_SOURCE_URL,
        fallback_rate: Decimal = Decimal(100),
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Создать источник курса.

        Args:
            url: URL JSON-источника.
            fallback_rate: Резервный курс при любой ошибке источника.
            timeout: Таймаут запроса в секундах.
            transport: Транспорт httpx (в тестах — httpx.MockTransport).
        """
        self._url = url
        self._fallback_rate = fallback_rate
        self._timeout = timeout
        self._transport = transport

    async def current_rate(self) -> ExchangeRate:
        """Получить текущий курс USD→RUB.

        Returns:
            ExchangeRate с курсом ЦБ или резервным курсом (is_fallback=True).
        """
        try:
            value = await self._fetch()
        except RateSourceUnavailableError as e:
            logger.warning(
                "Источник курса недоступен (%s), используем резервный курс %s",
                e.message,
                self._fallback_rate,
            )
            return ExchangeRate(value=self._fallback_rate, is_fallback=True)

        logger.debug("Курс USD→RUB: %s", value)
        return ExchangeRate(value=value)

    async def _fetch(self) -> Decimal:
        """Запросить и разобрать курс.

        Raises:
            RateSourceUnavailableError: Сеть, статус не 200, битый JSON,
                нет поля Valute.USD.Value или значение не положительное.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(self._url)
        except httpx.HTTPError as e:
            raise RateSourceUnavailableError(
                f"сетевая ошибка: {e!r}", original_error=e
            ) from e

        if response.status_code != 200:
            raise RateSourceUnavailableError(f"HTTP {response.status_code}")

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise RateSourceUnavailableError(
                "ответ не является JSON", original_error=e
            ) from e

        return self._parse_usd(payload)

    @staticmethod
    def _parse_usd(payload: Any) -> Decimal:
        """Достать Valute.USD.Value и проверить, что курс положительный."""
        try:
            raw_value = payload["Valute"]["USD"]["Value"]
        except (KeyError, TypeError) as e:
            raise RateSourceUnavailableError(
                "в ответе нет Valute.USD.Value", original_error=e
            ) from e

        if isinstance(raw_value, bool):
            raise RateSourceUnavailableError(f"некорректный курс: {raw_value!r}")

        try:
            # str() — чтобы float 92.5153 не превратился в 92.51529999...
            value = Decimal(str(raw_value))
        except InvalidOperation as e:
            raise RateSourceUnavailableError(
                f"некорректный курс: {raw_value!r}", original_error=e
            ) from e

        if not value.is_finite() or value <= 0:
            raise RateSourceUnavailableError(f"некорректный курс: {raw_value!r}")

        return value
