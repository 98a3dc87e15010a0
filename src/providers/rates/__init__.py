"""Источники курса валют."""

from src.providers.rates.cbr import CbrRateProvider, ExchangeRate, RateProvider

__all__ = [
    "CbrRateProvider",
    "ExchangeRate",
    "RateProvider",
]
