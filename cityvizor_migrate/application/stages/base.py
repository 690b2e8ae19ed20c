"""
Base Stage - базовый класс для всех стадий миграции

Одна стадия = один вид документов в MongoDB = одна (или несколько) таблиц
в PostgreSQL. Стадии связаны только через IdentifierMap, поэтому порядок
запуска важен.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List

from cityvizor_migrate.application.ledger_writer import LedgerWriter
from cityvizor_migrate.domain.identifiers import IdentifierMap
from cityvizor_migrate.infrastructure.source.store import SourceStore

logger = logging.getLogger(__name__)


class BaseStage(ABC):
    """
    Базовый класс для всех стадий

    Каждая стадия:
    1. Очищает свои таблицы (clear)
    2. Читает всю коллекцию из source store (load_records)
    3. Переносит каждую запись (handle_record)
    4. Сбрасывает буферы и делает commit
    """

    def __init__(
        self,
        source: SourceStore,
        writer: LedgerWriter,
        ids: IdentifierMap,
        stage_name: str,
    ):
        """
        Args:
            source: Document store, из которого читаем
            writer: Ledger writer (учитывает dry-run)
            ids: Маппинг идентификаторов текущего запуска
            stage_name: Уникальное имя стадии (для логов и статистики)
        """
        self.source = source
        self.writer = writer
        self.ids = ids
        self.stage_name = stage_name
        self.skipped = 0

    @abstractmethod
    def load_records(self) -> Iterable[Dict[str, Any]]:
        """
        Returns:
            Все документы коллекции в естественном порядке
        """
        pass

    @abstractmethod
    def handle_record(self, record: Dict[str, Any]) -> None:
        """
        Перенести один документ

        Args:
            record: Документ из MongoDB

        Raises:
            MigrationError: если документ нельзя перенести (прерывает запуск)
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """
        Удалить всё из таблиц стадии

        Note:
            Это полная замена, а не синхронизация!
        """
        pass

    def run(self) -> int:
        """
        Запустить стадию

        Returns:
            Количество прочитанных документов (включая пропущенные)

        Example:
            >>> stage = EventsStage(source, writer, ids)
            >>> count = stage.run()
            >>> print(f"Processed {count} events, skipped {stage.skipped}")
        """
        logger.info("=== %s ===", self.stage_name.upper())
        self.clear()

        processed_count = 0
        for record in self.load_records():
            self.handle_record(record)
            processed_count += 1

        self.writer.commit()

        logger.info(
            "%s: %d record(s) processed, %d skipped",
            self.stage_name, processed_count, self.skipped,
        )
        return processed_count


class MigrationOrchestrator:
    """
    Orchestrator для запуска всех стадий в правильном порядке
    """

    def __init__(self):
        self.stages: List[BaseStage] = []

    def register(self, stage: BaseStage) -> None:
        """
        Зарегистрировать стадию

        Args:
            stage: Экземпляр стадии

        Note:
            Порядок регистрации = порядок выполнения!
        """
        self.stages.append(stage)

    def run_all(self) -> dict[str, int]:
        """
        Запустить все зарегистрированные стадии

        Returns:
            Словарь {stage_name: processed_count}

        Example:
            >>> orchestrator = MigrationOrchestrator()
            >>> orchestrator.register(ProfilesStage(source, writer, ids, avatars))
            >>> orchestrator.register(YearsStage(source, writer, ids))
            >>> orchestrator.run_all()
            {'profiles': 310, 'years': 1420}
        """
        results = {}

        for stage in self.stages:
            results[stage.stage_name] = stage.run()

        return results
