"""Репозиторий журнала запросов к моделям."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.request import RequestRecord


class RequestRepository:
    """Репозиторий для работы с таблицей requests.

    Записи только создаются и дополняются — удаления нет.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_pending(
        self,
        *,
        model_id: int,
        owner_id: int,
        owner_telegram_id: int,
        input_text: str,
        modality: str,
    ) -> RequestRecord:
        """Создать запись в состоянии "ожидает расчёта" и зафиксировать её.

        Запись фиксируется ДО обращения к провайдеру: если дальнейшая
        обработка упадёт, в журнале останется след принятого запроса.
        """
        entry = RequestRecord(
            model_id=model_id,
            owner_id=owner_id,
            owner_telegram_id=owner_telegram_id,
            input_text=input_text,
            modality=modality,
            is_authorised=True,
            is_operated=False,
            billing_skipped=False,
        )
        self._session.add(entry)
        await self._session.commit()
        await self._session.refresh(entry)
        return entry

    async def mark_failed(self, entry: RequestRecord, note: str) -> RequestRecord:
        """Записать текст бизнес-ошибки. Запись остаётся нерассчитанной."""
        entry.note = note
        await self._session.commit()
        return entry
