"""Наценка поверх себестоимости провайдера.

Итоговая стоимость запроса в рублях:
    себестоимость_USD × курс × коэффициент_наценки

Коэффициент задаётся в config.yaml (billing.markup_coefficient).
Если он не указан — используется DEFAULT_MARKUP_COEFFICIENT.
"""

from decimal import Decimal

from src.config.yaml_config import BillingConfig

DEFAULT_MARKUP_COEFFICIENT = Decimal(2)


class CoefficientProvider:
    """Источник коэффициента наценки.

    Значение не проверяется на разумность: коэффициент 0.5 или 10
    считается осознанным решением оператора.
    """

    def __init__(self, config: BillingConfig) -> None:
        self._config = config

    def current_coefficient(self) -> Decimal:
        """Текущий коэффициент наценки."""
        if self._config.markup_coefficient is None:
            return DEFAULT_MARKUP_COEFFICIENT
        return self._config.markup_coefficient
