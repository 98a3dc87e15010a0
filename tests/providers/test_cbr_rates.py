"""Тесты для источника курса USD→RUB (CbrRateProvider).

Проверяют:
- Разбор Valute.USD.Value из JSON ЦБ
- Резервный курс при любой ошибке источника (сеть, статус, JSON, поле)
"""

from decimal import Decimal

import httpx
import pytest

from src.providers.rates import CbrRateProvider, ExchangeRate

RATE_URL = "https://rates.test/daily_json.js"


def _provider(handler: object, fallback: Decimal = Decimal(100)) -> CbrRateProvider:
    return CbrRateProvider(
        url=RATE_URL,
        fallback_rate=fallback,
        timeout=1.0,
        transport=httpx.MockTransport(handler),  # type: ignore[arg-type]
    )


class TestCbrRateProvider:
    """Тесты получения курса."""

    @pytest.mark.asyncio
    async def test_parses_usd_value(self) -> None:
        """Курс берётся из Valute.USD.Value без потери точности."""

        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == RATE_URL
            return httpx.Response(
                200, json={"Date": "2026-10-19", "Valute": {"USD": {"Value": 92.5153}}}
            )

        provider = _provider(handler)

        # Act
        rate = await provider.current_rate()

        # Assert
        assert rate == ExchangeRate(value=Decimal("92.5153"), is_fallback=False)

    @pytest.mark.asyncio
    async def test_fallback_on_network_error(self) -> None:
        """Сетевая ошибка → резервный курс."""

        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = _provider(handler, fallback=Decimal(95))

        # Act
        rate = await provider.current_rate()

        # Assert
        assert rate.value == Decimal(95)
        assert rate.is_fallback is True

    @pytest.mark.asyncio
    async def test_fallback_on_non_200(self) -> None:
        """Статус не 200 → резервный курс."""

        # Arrange
        provider = _provider(lambda request: httpx.Response(503, text="maintenance"))

        # Act
        rate = await provider.current_rate()

        # Assert
        assert rate.is_fallback is True
        assert rate.value == Decimal(100)

    @pytest.mark.asyncio
    async def test_fallback_on_malformed_json(self) -> None:
        """Ответ не JSON → резервный курс."""

        # Arrange
        provider = _provider(lambda request: httpx.Response(200, text="<html>oops"))

        # Act
        rate = await provider.current_rate()

        # Assert
        assert rate.is_fallback is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"Valute": {}},
            {"Valute": {"USD": {"Value": None}}},
            {"Valute": {"USD": {"Value": 0}}},
            {"Valute": {"USD": {"Value": -1.5}}},
            {"Valute": {"USD": {"Value": "abc"}}},
            {"Valute": {"USD": {"Value": True}}},
            [],
        ],
    )
    async def test_fallback_on_missing_or_invalid_value(self, payload: object) -> None:
        """Нет поля или курс не положительный → резервный курс."""
        # Arrange
        provider = _provider(lambda request: httpx.Response(200, json=payload))

        # Act
        rate = await provider.current_rate()

        # Assert
        assert rate.is_fallback is True
        assert rate.value == Decimal(100)
