"""Репозиторий для работы с пользователями.

Содержит все операции с таблицей users:
- Создание пользователя (вход в Mini App)
- Поиск по telegram_id
- Атомарное изменение баланса
"""

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import UserNotFoundError
from src.db.models.user import User


class UserRepository:
    """Репозиторий для работы с пользователями.

    Использует Dependency Injection — сессия передаётся в конструктор.

    Пример использования:
        repo = UserRepository(session)
        user = await repo.get_by_telegram_id(123456789)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Инициализировать репозиторий.

        Args:
            session: Асинхронная сессия SQLAlchemy.
        """
        self._session = session

    async def get_by_telegram_id(self, telegram_id: int) -> User | None:
        """Найти пользователя по Telegram ID.

        Args:
            telegram_id: ID пользователя в Telegram.

        Returns:
            User если найден, None если не существует.
        """
        # populate_existing — баланс всегда читается из БД, а не из identity map
        stmt = (
            select(User)
            .where(User.telegram_id == telegram_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> User | None:
        """Найти пользователя по внутреннему ID (баланс читается из БД)."""
        return await self._session.get(User, user_id, populate_existing=True)

    async def create(self, telegram_id: int, name: str | None = None) -> User:
        """Создать нового пользователя с нулевым балансом.

        Args:
            telegram_id: ID пользователя в Telegram.
            name: Имя пользователя.

        Returns:
            Созданный объект User (уже в БД).
        """
        user = User(telegram_id=telegram_id, name=name, balance=Decimal(0))
        self._session.add(user)
        await self._session.commit()
        await self._session.refresh(user)
        return user

    async def get_or_create(
        self, telegram_id: int, name: str | None = None
    ) -> tuple[User, bool]:
        """Получить пользователя или создать нового.

        Если два запроса пытаются создать одного пользователя одновременно,
        один из них получит IntegrityError и повторит поиск.

        Returns:
            Кортеж (user, created).
        """
        user = await self.get_by_telegram_id(telegram_id)
        if user:
            return user, False

        try:
            user = await self.create(telegram_id=telegram_id, name=name)
            return user, True
        except IntegrityError:
            # Другой запрос успел создать пользователя — откатываем и ищем снова
            await self._session.rollback()
            user = await self.get_by_telegram_id(telegram_id)
            if user is None:
                raise RuntimeError(
                    f"Не удалось создать или найти пользователя "
                    f"с telegram_id={telegram_id}"
                ) from None
            return user, False

    async def change_balance(
        self, telegram_id: int, delta: Decimal
    ) -> tuple[int, Decimal]:
        """Атомарно изменить баланс пользователя.

        Выполняется одним SQL-выражением:
            UPDATE users SET balance = balance + :delta WHERE telegram_id = :id

        Поэтому одновременные списания не теряют друг друга.
        НЕ делает commit — фиксация остаётся за вызывающим кодом,
        чтобы изменение баланса и связанные записи попали в одну транзакцию.

        Args:
            telegram_id: ID пользователя в Telegram.
            delta: Изменение баланса (+ начисление, - списание).

        Returns:
            Кортеж (user_id, balance_after).

        Raises:
            UserNotFoundError: Пользователь не найден (0 обновлённых строк).
        """
        stmt = (
            update(User)
            .where(User.telegram_id == telegram_id)
            .values(balance=User.balance + delta)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise UserNotFoundError(telegram_id)

        row = (
            await self._session.execute(
                select(User.id, User.balance).where(User.telegram_id == telegram_id)
            )
        ).one()
        return row.id, row.balance
