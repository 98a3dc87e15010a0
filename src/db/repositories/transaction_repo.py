"""Репозиторий для работы с транзакциями (журнал баланса).

Содержит все операции с таблицей transactions:
- Запись транзакции вместе с атомарным изменением баланса

Паттерн "леджер":
- Транзакции никогда не изменяются и не удаляются
- Каждое изменение User.balance сопровождается ровно одной транзакцией
"""

import json
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.transaction import Transaction, TransactionType
from src.db.repositories.user_repo import UserRepository


class TransactionRepository:
    """Репозиторий для работы с транзакциями.

    Пример использования:
        repo = TransactionRepository(session)
        transaction = await repo.apply(
            telegram_id=123,
            type_=TransactionType.PAYMENT,
            amount=Decimal("500"),
            description="Пополнение баланса",
        )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Инициализировать репозиторий.

        Args:
            session: Асинхронная сессия SQLAlchemy.
        """
        self._session = session
        self._users = UserRepository(session)

    async def apply(
        self,
        telegram_id: int,
        type_: TransactionType,
        amount: Decimal,
        description: str,
        metadata: dict[str, Any] | None = None,
        *,
        commit: bool = True,
    ) -> Transaction:
        """Изменить баланс пользователя и записать транзакцию.

        1. Атомарный UPDATE баланса (UserRepository.change_balance)
        2. Транзакция с balance_after, прочитанным после UPDATE

        Args:
            telegram_id: ID пользователя в Telegram.
            type_: Тип транзакции (TransactionType).
            amount: Сумма операции (+ начисление, - списание).
            description: Описание для истории.
            metadata: Дополнительные данные (сериализуются в JSON).
            commit: Зафиксировать сразу. False — когда вызывающий код
                фиксирует изменение баланса вместе с другими записями.

        Returns:
            Созданная транзакция.

        Raises:
            UserNotFoundError: Пользователь не найден.
        """
        user_id, balance_after = await self._users.change_balance(telegram_id, amount)

        transaction = Transaction(
            user_id=user_id,
            type=type_.value,
            amount=amount,
            balance_after=balance_after,
            description=description,
            metadata_json=(
                json.dumps(metadata, ensure_ascii=False, default=str)
                if metadata
                else None
            ),
        )
        self._session.add(transaction)

        if commit:
            await self._session.commit()
        else:
            await self._session.flush()

        return transaction
