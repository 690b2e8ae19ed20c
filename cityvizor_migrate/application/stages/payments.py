"""
Payments stage - MongoDB payments → data.payments

Ссылка на событие необязательна: неперенесённое событие → NULL.
"""
from cityvizor_migrate.application.stages.base import BaseStage
from cityvizor_migrate.infrastructure.db.models import PaymentRecord
from cityvizor_migrate.utils.numbers import to_amount, to_date, to_int


class PaymentsStage(BaseStage):

    def __init__(self, source, writer, ids):
        super().__init__(source, writer, ids, stage_name="payments")

    def clear(self) -> None:
        self.writer.clear(PaymentRecord)

    def load_records(self):
        return self.source.payments()

    def handle_record(self, record) -> None:
        counterparty_id = record.get("counterpartyId")
        self.writer.insert(PaymentRecord, {
            "profile_id": self.ids.resolve_profile_id(record.get("profile")),
            "year": to_int(record.get("year")),
            "paragraph": to_int(record.get("paragraph")),
            "item": to_int(record.get("item")),
            "unit": None,
            "event": self.ids.resolve_event_id(record.get("event")),
            "amount": to_amount(record.get("amount")),
            "date": to_date(record.get("date")),
            "counterparty_id": str(counterparty_id) if counterparty_id is not None else None,
            "counterparty_name": record.get("counterpartyName"),
            "description": record.get("description"),
        })
