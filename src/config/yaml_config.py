"""Загрузчик YAML-конфигурации.

Этот модуль загружает и валидирует config.yaml — файл с настройками,
которые можно менять без изменения кода.

Содержимое config.yaml:
- Настройки биллинга (наценка, резервный курс, минимальный баланс)
- Источник курса валют и его таймаут
- Таймауты обращений к AI-провайдерам
"""

from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# Официальный источник курса ЦБ РФ в формате JSON
DEFAULT_RATE_SOURCE_URL = "https://www.cbr-xml-daily.ru/daily_json.js"


class GenerationTimeouts(BaseModel):
    """Таймауты обращения к провайдеру для разных видов результата (в секундах).

    Если провайдер не ответил за указанное время — запрос считается неудачным
    (ProviderCallFailedError), списание не выполняется.

    Рекомендуемые значения:
    - text: 60 сек (обычно ответ приходит за 5-30 сек)
    - image: 120 сек (генерация может занять 1-2 минуты)
    """

    text: int = Field(default=60, gt=0)
    image: int = Field(default=120, gt=0)

    @property
    def max_timeout(self) -> int:
        """Наибольший таймаут — используется при создании HTTP-клиента."""
        return max(self.text, self.image)


class BillingConfig(BaseModel):
    """Настройки биллинга.

    Логика расчёта стоимости запроса:
    1. Провайдер сообщает количество входных и выходных токенов
    2. Себестоимость в USD = токены * цена_за_1M / 1_000_000 (по каждой стороне)
    3. Итог в рублях = себестоимость * курс_USD * markup_coefficient
    4. Итог округляется до 0.001 и списывается с баланса

    Если баланс пользователя меньше min_balance — запрос отклоняется
    со статусом lowbalance (без обращения к провайдеру).

    Attributes:
        markup_coefficient: Наценка поверх себестоимости.
            Если не указана — используется DEFAULT_MARKUP_COEFFICIENT (2).
        fallback_rate: Курс USD→RUB, если источник курса недоступен.
        min_balance: Минимальный баланс для выполнения запроса (в рублях).
        rate_source_url: URL JSON-источника курса ЦБ.
        rate_timeout_seconds: Таймаут запроса к источнику курса.
    """

    markup_coefficient: Decimal | None = Field(
        default=None,
        description="Наценка поверх себестоимости (пусто = значение по умолчанию)",
    )
    fallback_rate: Decimal = Field(
        default=Decimal(100),
        gt=0,
        description="Резервный курс USD→RUB при недоступности источника",
    )
    min_balance: Decimal = Field(
        default=Decimal(20),
        description="Минимальный баланс для выполнения запроса",
    )
    rate_source_url: str = Field(
        default=DEFAULT_RATE_SOURCE_URL,
        description="Источник курса валют (JSON ЦБ РФ)",
    )
    rate_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Таймаут запроса курса в секундах",
    )


class YamlConfig(BaseModel):
    """Главная YAML-конфигурация.

    Загружается из config.yaml при старте приложения.
    """

    billing: BillingConfig = BillingConfig()
    generation_timeouts: GenerationTimeouts = GenerationTimeouts()


def load_yaml_config(path: Path | str = "config.yaml") -> YamlConfig:
    """Загрузить и валидировать YAML-конфигурацию.

    Args:
        path: Путь к файлу конфигурации.

    Returns:
        Валидированный объект конфигурации.
        Если файла нет — конфигурация со значениями по умолчанию.

    Raises:
        yaml.YAMLError: Некорректный YAML.
        pydantic.ValidationError: Некорректная конфигурация.
    """
    config_path = Path(path)

    if not config_path.exists():
        return YamlConfig()

    with config_path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return YamlConfig.model_validate(data)


yaml_config = load_yaml_config()
