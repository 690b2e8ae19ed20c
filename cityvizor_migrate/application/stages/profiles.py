"""
Profiles stage - профили MongoDB → app.profiles + файлы аватаров
"""
import logging

from cityvizor_migrate.application.ledger_writer import LedgerWriter
from cityvizor_migrate.application.stages.base import BaseStage
from cityvizor_migrate.domain.identifiers import IdentifierMap
from cityvizor_migrate.domain.profile import profile_row
from cityvizor_migrate.infrastructure.db.models import ProfileRecord
from cityvizor_migrate.infrastructure.files.avatars import AvatarStore
from cityvizor_migrate.infrastructure.source.store import SourceStore

logger = logging.getLogger(__name__)


class ProfilesStage(BaseStage):

    def __init__(self, source: SourceStore, writer: LedgerWriter, ids: IdentifierMap, avatars: AvatarStore):
        super().__init__(source, writer, ids, stage_name="profiles")
        self.avatars = avatars

    def clear(self) -> None:
        self.writer.clear(ProfileRecord, restart_sequence=True)
        self.avatars.reset()

    def load_records(self):
        return self.source.profiles()

    def handle_record(self, record) -> None:
        """
        Перенести профиль и его аватар

        Args:
            record: Документ профиля (без avatar.data)

        Raises:
            UnknownStatus: неизвестный status профиля

        Note:
            Маппинг id записывается всегда, даже без аватара.
        """
        row = profile_row(record)

        # None в dry-run: id там не определены
        profile_id = self.writer.insert_returning_id(ProfileRecord, row)

        if record.get("avatar"):
            data = self.source.fetch_avatar(record["_id"])
            if data is not None:
                self.avatars.save(profile_id, row["avatar_type"], data)
            else:
                logger.warning("Profile %s: avatar metadata without data", record["_id"])

        self.ids.record_profile_id(record["_id"], profile_id)
