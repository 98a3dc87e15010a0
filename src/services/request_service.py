"""Обработка запроса к модели по токену доступа.

Порядок обработки:
1. Токен → AccessGrant (неизвестный токен — InvalidTokenError)
2. Владелец токена (не найден — UserNotFoundError)
3. Баланс не ниже billing.min_balance, иначе статус lowbalance
   (запись в журнале НЕ создаётся)
4. Запись журнала в состоянии "ожидает расчёта"
5. Вызов модели через ModalityDispatcher. Бизнес-ошибка записывается
   в note и возвращается клиенту как есть, без списания
6. Расчёт и списание через BillingLedger
7. Результат (текст или ссылка на изображение)

Инфраструктурные ошибки (БД, сбой провайдера, удаление владельца до
списания) не превращаются в результат: их логирует и превращает в 500
роутер. Запись журнала остаётся нерассчитанной.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    DispatchError,
    InvalidTokenError,
    ProviderCallFailedError,
    SettlementError,
    UserNotFoundError,
)
from src.db.repositories.grant_repo import GrantRepository
from src.db.repositories.request_repo import RequestRepository
from src.db.repositories.user_repo import UserRepository
from src.services.billing_service import BillingLedger
from src.services.dispatcher import ModalityDispatcher
from src.utils.logging import get_logger

logger = get_logger(__name__)


class RequestStatus(StrEnum):
    """Статус обработки запроса (уходит клиенту в поле status)."""

    SUCCESS = "success"
    LOW_BALANCE = "lowbalance"
    ERROR = "error"


@dataclass(frozen=True)
class RequestOutcome:
    """Итог обработки запроса.

    Attributes:
        status: success, lowbalance или error.
        result: Текст ответа или ссылка на изображение (для success).
        code: Машиночитаемый код ошибки (для error).
        message: Текст ошибки (для error).
        request_id: ID записи журнала (нет для lowbalance).
    """

    status: RequestStatus
    result: str | None = None
    code: str | None = None
    message: str | None = None
    request_id: int | None = None


class RequestService:
    """Оркестратор запроса: токен → баланс → журнал → модель → расчёт.

    Пример использования:
        service = RequestService(session, dispatcher, create_billing_ledger(session),
                                 yaml_config.billing.min_balance)
        outcome = await service.handle(token, "Привет!", "text_to_text")
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: ModalityDispatcher,
        ledger: BillingLedger,
        min_balance: Decimal,
    ) -> None:
        self._session = session
        self._dispatcher = dispatcher
        self._ledger = ledger
        self._min_balance = min_balance
        self._grants = GrantRepository(session)
        self._users = UserRepository(session)
        self._requests = RequestRepository(session)

    async def handle(
        self,
        token: str,
        input_text: str,
        modality: str,
        image_ref: str | None = None,
        aspect_ratio: str | None = None,
    ) -> RequestOutcome:
        """Обработать запрос к модели.

        Args:
            token: Токен доступа из заголовка Authorization.
            input_text: Текст запроса.
            modality: Тип запроса.
            image_ref: Ссылка на входное изображение (photo_url).
            aspect_ratio: Формат изображения (format).

        Returns:
            RequestOutcome.

        Raises:
            InvalidTokenError: Токен не найден.
            UserNotFoundError: Владелец токена не найден (до вызова модели).
            ProviderCallFailedError: Сетевой сбой, таймаут или ошибка API провайдера.
            SettlementError: Владелец удалён между проверкой баланса и списанием.
        """
        grant = await self._grants.get_by_token(token)
        if grant is None:
            raise InvalidTokenError()

        owner = await self._users.get_by_id(grant.user_id)
        if owner is None:
            raise UserNotFoundError(grant.telegram_id)

        model = grant.model
        balance = Decimal(str(owner.balance))
        if balance < self._min_balance:
            logger.info(
                "Недостаточный баланс: telegram_id=%d, balance=%s, min=%s",
                owner.telegram_id,
                balance,
                self._min_balance,
            )
            return RequestOutcome(status=RequestStatus.LOW_BALANCE)

        entry = await self._requests.create_pending(
            model_id=model.id,
            owner_id=owner.id,
            owner_telegram_id=owner.telegram_id,
            input_text=input_text,
            modality=modality,
        )

        try:
            dispatched = await self._dispatcher.dispatch(
                model, modality, input_text, image_ref, aspect_ratio
            )
        except ProviderCallFailedError as e:
            logger.error(
                "Запрос #%d: сбой провайдера, запись остаётся нерассчитанной: %s",
                entry.id,
                e,
            )
            raise
        except DispatchError as e:
            logger.warning(
                "Запрос #%d отклонён (%s): %s", entry.id, e.code, e.message
            )
            await self._requests.mark_failed(entry, e.message)
            return RequestOutcome(
                status=RequestStatus.ERROR,
                code=e.code,
                message=e.message,
                request_id=entry.id,
            )

        request_id = entry.id
        try:
            await self._ledger.settle(
                entry,
                dispatched.input_tokens,
                dispatched.output_tokens,
                model.input_price_usd,
                model.output_price_usd,
                owner.telegram_id,
            )
        except UserNotFoundError as e:
            raise SettlementError(
                request_id, f"владелец telegram_id={e.telegram_id} удалён до списания"
            ) from e

        return RequestOutcome(
            status=RequestStatus.SUCCESS,
            result=dispatched.result.value,
            request_id=request_id,
        )
