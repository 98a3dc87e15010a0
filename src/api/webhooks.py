"""Эндпоинты пополнения баланса.

- POST /webhook_payment — уведомление об оплате от Telegram-бота
- POST /redeemPromocode — активация промокода пользователем
- POST /createPromocode — создание промокода (X-Admin-Key)

Все суммы — в рублях.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from src.api.dependencies import SessionDep, require_admin_key
from src.core.exceptions import (
    PromocodeAlreadyUsedError,
    PromocodeNotFoundError,
    UserNotFoundError,
)
from src.db.models.transaction import TransactionType
from src.services.billing_service import create_billing_ledger
from src.services.promocode_service import PromocodeService
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


class PaymentWebhookBody(BaseModel):
    """Уведомление об оплате.

    Attributes:
        payd_user: Telegram ID оплатившего пользователя.
        payd_sum: Сумма пополнения в рублях.
    """

    payd_user: int = Field(alias="paydUser")
    payd_sum: Decimal = Field(alias="paydSum", gt=0)


class RedeemPromocodeBody(BaseModel):
    """Тело запроса активации промокода."""

    tlgid: int
    promocode: str = Field(min_length=1)


class CreatePromocodeBody(BaseModel):
    """Новый промокод."""

    code: str = Field(min_length=1, max_length=64)
    amount: Decimal = Field(gt=0)
    is_active: bool = True


@router.post("/webhook_payment")
async def webhook_payment(body: PaymentWebhookBody, session: SessionDep) -> JSONResponse:
    """Зачислить оплату на баланс пользователя."""
    logger.info(
        "Webhook оплаты: telegram_id=%d, sum=%s", body.payd_user, body.payd_sum
    )

    ledger = create_billing_ledger(session)
    try:
        transaction = await ledger.credit(
            body.payd_user,
            body.payd_sum,
            TransactionType.PAYMENT,
            "Пополнение баланса",
        )
    except UserNotFoundError:
        logger.warning("Webhook оплаты: пользователь %d не найден", body.payd_user)
        return JSONResponse(
            status_code=404, content={"status": "error", "message": "User not found"}
        )

    return JSONResponse(
        content={
            "status": "success",
            "message": "Webhook processed successfully",
            "balance": float(transaction.balance_after),
        }
    )


@router.post("/redeemPromocode")
async def redeem_promocode(body: RedeemPromocodeBody, session: SessionDep) -> JSONResponse:
    """Активировать промокод.

    status: success (с новым балансом), not_found или already_used.
    """
    service = PromocodeService(session)
    try:
        result = await service.redeem(body.tlgid, body.promocode)
    except PromocodeNotFoundError:
        return JSONResponse(content={"status": "not_found"})
    except PromocodeAlreadyUsedError:
        return JSONResponse(content={"status": "already_used"})
    except UserNotFoundError:
        return JSONResponse(
            status_code=404, content={"status": "error", "message": "User not found"}
        )

    return JSONResponse(
        content={
            "status": "success",
            "amount": float(result.amount),
            "balance": float(result.balance_after),
        }
    )


@router.post("/createPromocode", dependencies=[Depends(require_admin_key)])
async def create_promocode(body: CreatePromocodeBody, session: SessionDep) -> JSONResponse:
    """Создать промокод (служебный эндпоинт)."""
    try:
        promocode = await PromocodeService(session).create(
            body.code, body.amount, body.is_active
        )
    except IntegrityError:
        await session.rollback()
        return JSONResponse(status_code=409, content={"status": "already_exists"})
    return JSONResponse(
        status_code=201,
        content={
            "status": "created",
            "promocode": {
                "id": promocode.id,
                "code": promocode.code,
                "amount": float(promocode.amount),
                "isActive": promocode.is_active,
            },
        },
    )
