"""
Ledger Writer - единственный компонент, который меняет PostgreSQL

Полная замена по таблицам: clear() очищает таблицу, затем строки пишутся
через insert() (буфер, bulk) или insert_returning_id() (по одной, когда нужен
сгенерированный id). В dry-run все изменяющие вызовы ничего не делают и id не
выдаются.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import delete, insert, text
from sqlalchemy.orm import Session

from cityvizor_migrate.infrastructure.db.session import Base

logger = logging.getLogger(__name__)


class LedgerWriter:

    def __init__(self, db: Session, dry_run: bool = False, batch_size: int = 200):
        """
        Args:
            db: SQLAlchemy session
            dry_run: Пропускать все записи (control flow тот же)
            batch_size: Строк на один bulk INSERT (default: 200)
        """
        self.db = db
        self.dry_run = dry_run
        self.batch_size = batch_size
        self.writes = 0
        self._buffers: Dict[Type[Base], List[Dict[str, Any]]] = {}

    def clear(self, model: Type[Base], restart_sequence: bool = False) -> None:
        """
        Удалить все строки таблицы (и сбросить sequence id в PostgreSQL)

        Args:
            model: ORM модель таблицы
            restart_sequence: ALTER SEQUENCE <table>_id_seq RESTART WITH 1
        """
        table = model.__table__
        if self.dry_run:
            logger.debug("dry run: not clearing %s", table.fullname)
            return

        self.db.execute(delete(model))
        self.writes += 1

        # SQLite сам начинает rowid заново в пустой таблице
        if restart_sequence and self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(text(f"ALTER SEQUENCE {table.fullname}_id_seq RESTART WITH 1"))
            self.writes += 1

        logger.info("Cleared %s", table.fullname)

    def insert_returning_id(self, model: Type[Base], row: Dict[str, Any]) -> Optional[int]:
        """
        Вставить одну строку сразу и вернуть её id

        Args:
            model: ORM модель таблицы
            row: Значения колонок

        Returns:
            Новый primary key, None в dry-run
        """
        if self.dry_run:
            return None

        record = model(**row)
        self.db.add(record)
        self.db.flush()  # Получить ID без commit
        self.writes += 1

        # Нужен только id; identity map остаётся пустым для следующего clear()
        record_id = record.id
        self.db.expunge(record)
        return record_id

    def insert(self, model: Type[Base], row: Dict[str, Any]) -> None:
        """
        Поставить строку в очередь; пишется батчами по batch_size

        Note:
            Строки в буфере не видны запросам до flush()!
        """
        if self.dry_run:
            return

        buffer = self._buffers.setdefault(model, [])
        buffer.append(row)
        if len(buffer) >= self.batch_size:
            self._flush_model(model)

    def _flush_model(self, model: Type[Base]) -> None:
        rows = self._buffers.get(model)
        if not rows:
            return
        self.db.execute(insert(model), rows)
        self.writes += 1
        self._buffers[model] = []

    def flush(self) -> None:
        """Записать все строки из буферов"""
        for model in list(self._buffers):
            self._flush_model(model)

    def commit(self) -> None:
        if self.dry_run:
            return
        self.flush()
        self.db.commit()
