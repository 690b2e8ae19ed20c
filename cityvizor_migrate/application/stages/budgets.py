"""
Budgets stage - MongoDB budgets → data.accounting

Запускается последней: нужны id и профилей, и событий.
"""
from cityvizor_migrate.application.stages.base import BaseStage
from cityvizor_migrate.domain.budget import BudgetDecomposer, BudgetDocument
from cityvizor_migrate.infrastructure.db.models import AccountingRecord


class BudgetsStage(BaseStage):

    def __init__(self, source, writer, ids):
        super().__init__(source, writer, ids, stage_name="budgets")
        self.decomposer = BudgetDecomposer(ids)
        self.entries_count = 0

    def clear(self) -> None:
        self.writer.clear(AccountingRecord)

    def load_records(self):
        return self.source.budgets()

    def handle_record(self, record) -> None:
        """
        Разложить бюджет одного профиля за год на записи data.accounting

        Args:
            record: Документ бюджета (paragraphs, items)
        """
        budget = BudgetDocument.from_document(record)
        for entry in self.decomposer.decompose(budget):
            self.writer.insert(AccountingRecord, entry.as_row())
            self.entries_count += 1
