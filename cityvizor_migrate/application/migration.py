"""
Migration run - wires the stages together and runs them in dependency order

profiles → years → events → payments → budgets
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from sqlalchemy.orm import Session

from cityvizor_migrate.application.ledger_writer import LedgerWriter
from cityvizor_migrate.application.stages.base import MigrationOrchestrator
from cityvizor_migrate.application.stages.budgets import BudgetsStage
from cityvizor_migrate.application.stages.events import EventsStage
from cityvizor_migrate.application.stages.payments import PaymentsStage
from cityvizor_migrate.application.stages.profiles import ProfilesStage
from cityvizor_migrate.application.stages.years import YearsStage
from cityvizor_migrate.domain.identifiers import IdentifierMap
from cityvizor_migrate.infrastructure.files.avatars import AvatarStore
from cityvizor_migrate.infrastructure.source.store import SourceStore

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    processed: Dict[str, int] = field(default_factory=dict)
    skipped: Dict[str, int] = field(default_factory=dict)
    accounting_entries: int = 0
    db_writes: int = 0
    file_writes: int = 0


def run_migration(
    source: SourceStore,
    db: Session,
    data_path: Path,
    dry_run: bool = False,
    batch_size: int = 200,
) -> MigrationResult:
    """
    Run the whole migration once (full replace of all destination tables)

    Args:
        source: Document store to read from
        db: Session on the destination database
        data_path: Directory that holds avatars/
        dry_run: Read and compute everything, write nothing
        batch_size: Rows per bulk INSERT

    Returns:
        MigrationResult with per-stage counts

    Raises:
        MigrationError: on the first record that cannot be migrated
    """
    if dry_run:
        logger.info("Dry run: no changes will be written")

    ids = IdentifierMap()
    writer = LedgerWriter(db, dry_run=dry_run, batch_size=batch_size)
    avatars = AvatarStore(data_path, dry_run=dry_run)

    budgets = BudgetsStage(source, writer, ids)

    orchestrator = MigrationOrchestrator()
    orchestrator.register(ProfilesStage(source, writer, ids, avatars))
    orchestrator.register(YearsStage(source, writer, ids))
    orchestrator.register(EventsStage(source, writer, ids))
    orchestrator.register(PaymentsStage(source, writer, ids))
    orchestrator.register(budgets)

    processed = orchestrator.run_all()

    result = MigrationResult(
        processed=processed,
        skipped={stage.stage_name: stage.skipped for stage in orchestrator.stages},
        accounting_entries=budgets.entries_count,
        db_writes=writer.writes,
        file_writes=avatars.writes,
    )
    logger.info("=== FINISHED === %s, %d accounting entries", processed, result.accounting_entries)
    return result
