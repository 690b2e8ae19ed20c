"""
Events stage - MongoDB events → data.events

Переносятся только события с числовым srcId (id в бухгалтерской системе);
остальные не попадают в маппинг, и все ссылки на них становятся NULL.
"""
import logging

from cityvizor_migrate.application.stages.base import BaseStage
from cityvizor_migrate.infrastructure.db.models import EventRecord
from cityvizor_migrate.utils.numbers import parse_source_id, to_int

logger = logging.getLogger(__name__)


class EventsStage(BaseStage):

    def __init__(self, source, writer, ids):
        super().__init__(source, writer, ids, stage_name="events")

    def clear(self) -> None:
        self.writer.clear(EventRecord)

    def load_records(self):
        return self.source.events()

    def handle_record(self, record) -> None:
        """
        Перенести событие или пропустить его

        Note:
            srcId "abc", "0", "" - не ошибка, событие просто пропускается.
        """
        event_id = parse_source_id(record.get("srcId"))
        if event_id is None:
            logger.debug("Event %s skipped: srcId %r", record.get("_id"), record.get("srcId"))
            self.skipped += 1
            return

        self.writer.insert(EventRecord, {
            "profile_id": self.ids.resolve_profile_id(record.get("profile")),
            "year": to_int(record.get("year")),
            "id": event_id,
            "name": record.get("name"),
        })
        self.ids.record_event_id(record["_id"], event_id)
