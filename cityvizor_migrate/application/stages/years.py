"""
Years stage - MongoDB etls → app.years (один год профиля на документ)
"""
from cityvizor_migrate.application.stages.base import BaseStage
from cityvizor_migrate.infrastructure.db.models import YearRecord
from cityvizor_migrate.utils.numbers import to_date, to_int


class YearsStage(BaseStage):

    def __init__(self, source, writer, ids):
        super().__init__(source, writer, ids, stage_name="years")

    def clear(self) -> None:
        self.writer.clear(YearRecord)

    def load_records(self):
        return self.source.years()

    def handle_record(self, record) -> None:
        """
        Raises:
            UnresolvedReference: профиль года не был перенесён
        """
        self.writer.insert(YearRecord, {
            "profile_id": self.ids.resolve_profile_id(record.get("profile")),
            "year": to_int(record.get("year")),
            "validity": to_date(record.get("validity")),
            "hidden": not record.get("visible"),
        })
