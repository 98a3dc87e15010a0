"""Сервис биллинга (расчёт и списание стоимости запросов).

Этот модуль реализует расчёт запроса к модели:
- Себестоимость в USD по токенам и ценам модели (за 1M токенов)
- Перевод в рубли по текущему курсу ЦБ и наценка
- Атомарное списание с баланса вместе с записью транзакции
- Начисления (пополнение, промокоды)

Формула:
    cost_usd = input_tokens × input_price / 1M + output_tokens × output_price / 1M
    final_cost = round(cost_usd × rate × coefficient, 3)   # ROUND_HALF_UP

Если провайдер не сообщил токены (0 и 0) — списание пропускается,
запись помечается billing_skipped=True.

Пример использования:
    async with get_async_session_factory()() as session:
        ledger = create_billing_ledger(session)
        outcome = await ledger.settle(entry, 120, 340, model.input_price_usd,
                                      model.output_price_usd, user.telegram_id)
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.yaml_config import YamlConfig
from src.core.exceptions import SettlementError, UserNotFoundError
from src.db.models.request import RequestRecord
from src.db.models.transaction import Transaction, TransactionType
from src.db.repositories.transaction_repo import TransactionRepository
from src.providers.rates import CbrRateProvider, RateProvider
from src.services.pricing import CoefficientProvider
from src.utils.logging import get_logger

logger = get_logger(__name__)

TOKENS_PER_PRICE_UNIT = Decimal(1_000_000)
COST_QUANTUM = Decimal("0.001")


@dataclass(frozen=True)
class SettlementOutcome:
    """Результат расчёта записи журнала.

    Attributes:
        billing_skipped: Провайдер не вернул токены, списания не было.
        cost_usd: Себестоимость запроса в USD.
        rate: Курс USD→RUB, по которому считали.
        rate_is_fallback: Курс резервный (источник был недоступен).
        coefficient: Коэффициент наценки.
        final_cost: Списанная сумма в рублях.
        balance_after: Баланс владельца после списания.
    """

    billing_skipped: bool
    cost_usd: Decimal = Decimal(0)
    rate: Decimal | None = None
    rate_is_fallback: bool = False
    coefficient: Decimal | None = None
    final_cost: Decimal = Decimal(0)
    balance_after: Decimal | None = None


def _to_decimal(value: Decimal | float | int) -> Decimal:
    # SQLite отдаёт Numeric через float — приводим через str
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_cost_usd(
    input_tokens: int,
    output_tokens: int,
    input_price: Decimal | float,
    output_price: Decimal | float,
) -> tuple[Decimal, Decimal]:
    """Себестоимость входной и выходной части запроса в USD.

    Args:
        input_tokens: Входные токены.
        output_tokens: Выходные токены.
        input_price: Цена 1M входных токенов в USD.
        output_price: Цена 1M выходных токенов в USD.

    Returns:
        Кортеж (input_cost_usd, output_cost_usd).
    """
    input_cost = Decimal(input_tokens) * _to_decimal(input_price) / TOKENS_PER_PRICE_UNIT
    output_cost = (
        Decimal(output_tokens) * _to_decimal(output_price) / TOKENS_PER_PRICE_UNIT
    )
    return input_cost, output_cost


def calculate_final_cost(
    cost_usd: Decimal, rate: Decimal, coefficient: Decimal
) -> Decimal:
    """Итоговая стоимость в рублях, округлённая до 0.001 (ROUND_HALF_UP)."""
    return (cost_usd * rate * coefficient).quantize(COST_QUANTUM, rounding=ROUND_HALF_UP)


class BillingLedger:
    """Расчёт записей журнала запросов и операции с балансом.

    Использует Dependency Injection: сессия, источник курса и источник
    коэффициента передаются в конструктор (в тестах — заглушки).

    Attributes:
        _session: Асинхронная сессия SQLAlchemy.
        _rates: Источник курса USD→RUB.
        _coefficients: Источник коэффициента наценки.
        _transactions: Репозиторий транзакций.
    """

    def __init__(
        self,
        session: AsyncSession,
        rate_provider: RateProvider,
        coefficient_provider: CoefficientProvider,
    ) -> None:
        self._session = session
        self._rates = rate_provider
        self._coefficients = coefficient_provider
        self._transactions = TransactionRepository(session)

    async def settle(
        self,
        entry: RequestRecord,
        input_tokens: int,
        output_tokens: int,
        input_price: Decimal | float,
        output_price: Decimal | float,
        owner_telegram_id: int,
    ) -> SettlementOutcome:
        """Рассчитать запись журнала и списать стоимость с баланса.

        Списание и заполнение записи фиксируются одним commit.

        Args:
            entry: Запись журнала в состоянии "ожидает расчёта".
            input_tokens: Входные токены по данным провайдера.
            output_tokens: Выходные токены по данным провайдера.
            input_price: Цена 1M входных токенов в USD.
            output_price: Цена 1M выходных токенов в USD.
            owner_telegram_id: Telegram ID владельца токена.

        Returns:
            SettlementOutcome.

        Raises:
            UserNotFoundError: Владелец удалён между проверкой и списанием.
                Сессия откатывается, запись остаётся нерассчитанной.
            SettlementError: Запись уже рассчитана (повторного списания нет).
        """
        entry_id = entry.id
        if not entry.is_pending:
            raise SettlementError(entry_id, "запись уже рассчитана")

        if input_tokens == 0 and output_tokens == 0:
            entry.input_tokens = 0
            entry.output_tokens = 0
            entry.billing_skipped = True
            entry.is_operated = True
            await self._session.commit()

            logger.warning(
                "Провайдер не вернул токены, списание пропущено: request_id=%d",
                entry_id,
            )
            return SettlementOutcome(billing_skipped=True)

        input_cost, output_cost = calculate_cost_usd(
            input_tokens, output_tokens, input_price, output_price
        )
        cost_usd = input_cost + output_cost

        rate = await self._rates.current_rate()
        coefficient = self._coefficients.current_coefficient()
        final_cost = calculate_final_cost(cost_usd, rate.value, coefficient)

        try:
            transaction = await self._transactions.apply(
                owner_telegram_id,
                TransactionType.REQUEST_CHARGE,
                -final_cost,
                f"Запрос #{entry_id}",
                metadata={
                    "request_id": entry_id,
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens,
                    "rate": rate.value,
                    "rate_is_fallback": rate.is_fallback,
                    "coefficient": coefficient,
                },
                commit=False,
            )
        except UserNotFoundError:
            await self._session.rollback()
            logger.error(
                "Владелец не найден при списании: request_id=%d, telegram_id=%d",
                entry_id,
                owner_telegram_id,
            )
            raise

        entry.input_tokens = input_tokens
        entry.output_tokens = output_tokens
        entry.input_cost_usd = input_cost
        entry.output_cost_usd = output_cost
        entry.rate = rate.value
        entry.final_cost = final_cost
        entry.is_operated = True
        balance_after = transaction.balance_after
        await self._session.commit()

        logger.info(
            "Запрос рассчитан: request_id=%d, tokens=%d/%d, cost_usd=%s, "
            "rate=%s%s, coefficient=%s, final_cost=%s",
            entry_id,
            input_tokens,
            output_tokens,
            cost_usd,
            rate.value,
            " (резервный)" if rate.is_fallback else "",
            coefficient,
            final_cost,
        )
        return SettlementOutcome(
            billing_skipped=False,
            cost_usd=cost_usd,
            rate=rate.value,
            rate_is_fallback=rate.is_fallback,
            coefficient=coefficient,
            final_cost=final_cost,
            balance_after=balance_after,
        )

    async def credit(
        self,
        telegram_id: int,
        amount: Decimal,
        type_: TransactionType = TransactionType.PAYMENT,
        description: str = "Пополнение баланса",
        metadata: dict[str, Any] | None = None,
    ) -> Transaction:
        """Начислить сумму на баланс.

        Raises:
            UserNotFoundError: Пользователь не найден.
        """
        transaction = await self._transactions.apply(
            telegram_id, type_, amount, description, metadata
        )
        logger.info(
            "Начисление: telegram_id=%d, amount=%s, type=%s, balance=%s",
            telegram_id,
            amount,
            type_.value,
            transaction.balance_after,
        )
        return transaction


def create_billing_ledger(
    session: AsyncSession,
    yaml_config: YamlConfig | None = None,
) -> BillingLedger:
    """Создать BillingLedger (factory function).

    Использует глобальный yaml_config если не передан явно.

    Args:
        session: Асинхронная сессия SQLAlchemy.
        yaml_config: YAML-конфигурация (опционально, берётся из глобальной).

    Returns:
        Настроенный экземпляр BillingLedger.
    """
    if yaml_config is None:
        from src.config.yaml_config import yaml_config as global_yaml_config

        yaml_config = global_yaml_config

    billing = yaml_config.billing
    return BillingLedger(
        session=session,
        rate_provider=CbrRateProvider(
            url=billing.rate_source_url,
            fallback_rate=billing.fallback_rate,
            timeout=billing.rate_timeout_seconds,
        ),
        coefficient_provider=CoefficientProvider(billing),
    )
