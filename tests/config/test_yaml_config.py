"""Тесты для загрузки и валидации YAML-конфигурации."""

import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config.yaml_config import DEFAULT_RATE_SOURCE_URL, YamlConfig, load_yaml_config


def _load(yaml_content: str) -> YamlConfig:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(yaml_content)
        temp_path = f.name

    try:
        return load_yaml_config(temp_path)
    finally:
        Path(temp_path).unlink()


def test_load_billing_section() -> None:
    """Тест загрузки секции billing."""
    config = _load(
        """
billing:
  markup_coefficient: 2.5
  fallback_rate: 95.5
  min_balance: 10
generation_timeouts:
  text: 30
  image: 90
"""
    )

    assert config.billing.markup_coefficient == Decimal("2.5")
    assert config.billing.fallback_rate == Decimal("95.5")
    assert config.billing.min_balance == Decimal(10)
    assert config.generation_timeouts.text == 30
    assert config.generation_timeouts.image == 90
    assert config.generation_timeouts.max_timeout == 90


def test_load_yaml_config_nonexistent_file_returns_defaults() -> None:
    """Тест: загрузка несуществующего файла возвращает значения по умолчанию."""
    config = load_yaml_config("nonexistent_file.yaml")

    assert config.billing.markup_coefficient is None
    assert config.billing.fallback_rate == Decimal(100)
    assert config.billing.min_balance == Decimal(20)
    assert config.billing.rate_source_url == DEFAULT_RATE_SOURCE_URL
    assert config.generation_timeouts.text == 60
    assert config.generation_timeouts.image == 120


def test_empty_file_returns_defaults() -> None:
    """Тест: пустой файл обрабатывается как конфиг по умолчанию."""
    config = _load("")

    assert config.billing.min_balance == Decimal(20)


def test_partial_billing_keeps_defaults() -> None:
    """Тест: не указанные поля получают значения по умолчанию."""
    config = _load(
        """
billing:
  min_balance: 5
"""
    )

    assert config.billing.min_balance == Decimal(5)
    assert config.billing.fallback_rate == Decimal(100)
    assert config.billing.markup_coefficient is None


@pytest.mark.parametrize("rate", [0, -1])
def test_fallback_rate_must_be_positive(rate: int) -> None:
    """Тест: резервный курс должен быть положительным."""
    with pytest.raises(ValidationError):
        _load(f"billing:\n  fallback_rate: {rate}\n")


def test_timeouts_must_be_positive() -> None:
    """Тест: таймаут 0 не проходит валидацию."""
    with pytest.raises(ValidationError):
        _load("generation_timeouts:\n  text: 0\n")


def test_repository_config_is_valid() -> None:
    """Тест: config.yaml из репозитория проходит валидацию."""
    config_path = Path(__file__).resolve().parents[2] / "config.yaml"

    config = load_yaml_config(config_path)

    assert config.billing.markup_coefficient == Decimal(2)
    assert config.billing.min_balance == Decimal(20)
