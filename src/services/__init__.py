"""Сервисы приложения.

Этот пакет содержит бизнес-логику приложения.

Сервисы:
- RequestService — обработка запроса к модели по токену доступа.
- ModalityDispatcher — проверка запроса и вызов провайдера.
- ResponseExtractor — извлечение текста или изображения из ответа.
- BillingLedger — расчёт стоимости запроса и операции с балансом.
- PromocodeService — активация промокодов.
"""

from src.services.billing_service import (
    BillingLedger,
    SettlementOutcome,
    create_billing_ledger,
)
from src.services.dispatcher import DispatchResult, ModalityDispatcher
from src.services.extraction import ExtractionResult, ResponseExtractor, ResultKind
from src.services.promocode_service import PromocodeService, RedemptionResult
from src.services.request_service import RequestOutcome, RequestService, RequestStatus

__all__ = [
    "BillingLedger",
    "DispatchResult",
    "ExtractionResult",
    "ModalityDispatcher",
    "PromocodeService",
    "RedemptionResult",
    "RequestOutcome",
    "RequestService",
    "RequestStatus",
    "ResponseExtractor",
    "ResultKind",
    "SettlementOutcome",
    "create_billing_ledger",
]
