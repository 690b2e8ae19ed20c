"""
Budget decomposition - nested budget document → flat accounting entries

A budget document (one per profile and year) holds paragraphs (expenditure
categories) and items (income/expenditure lines). Each of them declares totals
and may break part of them down to events. Every breakdown becomes one entry per
event; whatever the events do not cover becomes a single residual entry with
event=None, so the entries of one paragraph and type sum to the declared total.

Entry types:
- UCT: actual (realized) amounts
- ROZ: planned (budgeted) amounts
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Tuple

from cityvizor_migrate.domain.identifiers import IdentifierMap
from cityvizor_migrate.utils.numbers import to_amount, to_int

TYPE_ACTUAL = "UCT"
TYPE_PLANNED = "ROZ"


@dataclass(frozen=True)
class AccountingEntry:
    profile_id: Optional[int]
    year: int
    type: str
    paragraph: Optional[int]
    item: Optional[int]
    event: Optional[int]
    amount: Decimal

    def as_row(self) -> Dict[str, Any]:
        return {
            "profile_id": self.profile_id,
            "year": self.year,
            "type": self.type,
            "paragraph": self.paragraph,
            "item": self.item,
            "unit": None,
            "event": self.event,
            "amount": self.amount,
        }


# ---------------------------------------------------------------------------
# Budget document
# ---------------------------------------------------------------------------


@dataclass
class ParagraphEvent:
    event: Any
    expenditure_amount: Decimal
    budget_expenditure_amount: Decimal

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ParagraphEvent":
        return cls(
            event=doc.get("event"),
            expenditure_amount=to_amount(doc.get("expenditureAmount")),
            budget_expenditure_amount=to_amount(doc.get("budgetExpenditureAmount")),
        )


@dataclass
class Paragraph:
    id: Optional[int]
    expenditure_amount: Decimal
    budget_expenditure_amount: Decimal
    events: List[ParagraphEvent] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Paragraph":
        return cls(
            id=to_int(doc.get("id")),
            expenditure_amount=to_amount(doc.get("expenditureAmount")),
            budget_expenditure_amount=to_amount(doc.get("budgetExpenditureAmount")),
            events=[ParagraphEvent.from_document(e) for e in doc.get("events") or []],
        )


@dataclass
class ItemEvent:
    event: Any
    income_amount: Decimal
    expenditure_amount: Decimal
    budget_income_amount: Decimal
    budget_expenditure_amount: Decimal

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ItemEvent":
        return cls(
            event=doc.get("event"),
            income_amount=to_amount(doc.get("incomeAmount")),
            expenditure_amount=to_amount(doc.get("expenditureAmount")),
            budget_income_amount=to_amount(doc.get("budgetIncomeAmount")),
            budget_expenditure_amount=to_amount(doc.get("budgetExpenditureAmount")),
        )


@dataclass
class Item:
    id: Optional[int]
    income_amount: Decimal
    expenditure_amount: Decimal
    budget_income_amount: Decimal
    budget_expenditure_amount: Decimal
    events: List[ItemEvent] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Item":
        return cls(
            id=to_int(doc.get("id")),
            income_amount=to_amount(doc.get("incomeAmount")),
            expenditure_amount=to_amount(doc.get("expenditureAmount")),
            budget_income_amount=to_amount(doc.get("budgetIncomeAmount")),
            budget_expenditure_amount=to_amount(doc.get("budgetExpenditureAmount")),
            events=[ItemEvent.from_document(e) for e in doc.get("events") or []],
        )


@dataclass
class BudgetDocument:
    profile: Any
    year: int
    paragraphs: List[Paragraph] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "BudgetDocument":
        return cls(
            profile=doc.get("profile"),
            year=to_int(doc.get("year")),
            paragraphs=[Paragraph.from_document(p) for p in doc.get("paragraphs") or []],
            items=[Item.from_document(i) for i in doc.get("items") or []],
        )


# ---------------------------------------------------------------------------
# Remainder arithmetic
# ---------------------------------------------------------------------------


@dataclass
class Remainder:
    """
    Running unallocated amount of one paragraph/item for one entry type

    Paragraphs only use the expenditure dimension.
    """
    income: Decimal = Decimal(0)
    expenditure: Decimal = Decimal(0)

    def allocate(self, income: Decimal, expenditure: Decimal) -> None:
        self.income -= income
        self.expenditure -= expenditure

    @property
    def is_allocated(self) -> bool:
        return not self.income and not self.expenditure


@dataclass
class Allocation:
    """Resolved events of one paragraph/item plus what is left of its totals"""
    events: List[Tuple[int, Any]]
    actual: Remainder
    planned: Remainder


class BudgetDecomposer:
    """
    Turns budget documents into accounting entries

    Events are resolved through the IdentifierMap; a paragraph/item event whose
    event was never migrated is skipped and does not reduce the remainder.
    Negative remainders (events exceed the declared total) are emitted as they
    are.

    Example:
        >>> decomposer = BudgetDecomposer(ids)
        >>> entries = list(decomposer.decompose(BudgetDocument.from_document(doc)))
    """

    def __init__(self, ids: IdentifierMap):
        self.ids = ids

    def decompose(self, budget: BudgetDocument) -> Iterator[AccountingEntry]:
        """
        Разложить бюджет профиля за год на записи

        Args:
            budget: Документ бюджета

        Returns:
            Записи в порядке документа: сначала paragraphs, потом items

        Raises:
            UnresolvedReference: профиль бюджета не был перенесён
        """
        profile_id = self.ids.resolve_profile_id(budget.profile)

        for paragraph in budget.paragraphs:
            yield from self.decompose_paragraph(profile_id, budget.year, paragraph)

        for item in budget.items:
            yield from self.decompose_item(profile_id, budget.year, item)

    # -- paragraphs ---------------------------------------------------------

    def allocate_paragraph(self, paragraph: Paragraph) -> Allocation:
        """
        Найти перенесённые события paragraph и посчитать остатки

        Returns:
            Allocation: события с их srcId + остаток UCT и ROZ
        """
        allocation = Allocation(
            events=[],
            actual=Remainder(expenditure=paragraph.expenditure_amount),
            planned=Remainder(expenditure=paragraph.budget_expenditure_amount),
        )
        for event in paragraph.events:
            event_id = self.ids.resolve_event_id(event.event)
            if event_id is None:
                continue
            allocation.events.append((event_id, event))
            allocation.actual.allocate(Decimal(0), event.expenditure_amount)
            allocation.planned.allocate(Decimal(0), event.budget_expenditure_amount)
        return allocation

    def decompose_paragraph(
        self,
        profile_id: Optional[int],
        year: int,
        paragraph: Paragraph,
    ) -> List[AccountingEntry]:
        """
        Args:
            profile_id: id профиля в PostgreSQL
            year: Год бюджета
            paragraph: Paragraph из документа

        Returns:
            UCT + ROZ на каждое событие, затем не более одного остатка на тип

        Note:
            Отрицательный остаток (события больше объявленной суммы) пишется как есть!
        """
        allocation = self.allocate_paragraph(paragraph)

        def entry(entry_type: str, event_id: Optional[int], amount: Decimal) -> AccountingEntry:
            return AccountingEntry(
                profile_id=profile_id,
                year=year,
                type=entry_type,
                paragraph=paragraph.id,
                item=None,
                event=event_id,
                amount=amount,
            )

        entries = []
        for event_id, event in allocation.events:
            entries.append(entry(TYPE_ACTUAL, event_id, event.expenditure_amount))
            entries.append(entry(TYPE_PLANNED, event_id, event.budget_expenditure_amount))

        if allocation.actual.expenditure:
            entries.append(entry(TYPE_ACTUAL, None, allocation.actual.expenditure))
        if allocation.planned.expenditure:
            entries.append(entry(TYPE_PLANNED, None, allocation.planned.expenditure))
        return entries

    # -- items --------------------------------------------------------------

    def allocate_item(self, item: Item) -> Allocation:
        """
        То же, что allocate_paragraph, но income и expenditure уменьшаются
        независимо друг от друга
        """
        allocation = Allocation(
            events=[],
            actual=Remainder(income=item.income_amount, expenditure=item.expenditure_amount),
            planned=Remainder(income=item.budget_income_amount, expenditure=item.budget_expenditure_amount),
        )
        for event in item.events:
            event_id = self.ids.resolve_event_id(event.event)
            if event_id is None:
                continue
            allocation.events.append((event_id, event))
            allocation.actual.allocate(event.income_amount, event.expenditure_amount)
            allocation.planned.allocate(event.budget_income_amount, event.budget_expenditure_amount)
        return allocation

    def decompose_item(
        self,
        profile_id: Optional[int],
        year: int,
        item: Item,
    ) -> List[AccountingEntry]:
        """
        Args:
            profile_id: id профиля в PostgreSQL
            year: Год бюджета
            item: Item из документа

        Returns:
            Записи item; сумма записи = max(income, expenditure)

        Note:
            Остаток пишется, если ненулевой хотя бы один из двух остатков,
            а сумма остатка - их max (может быть 0).
        """
        allocation = self.allocate_item(item)

        def entry(entry_type: str, event_id: Optional[int], amount: Decimal) -> AccountingEntry:
            return AccountingEntry(
                profile_id=profile_id,
                year=year,
                type=entry_type,
                paragraph=None,
                item=item.id,
                event=event_id,
                amount=amount,
            )

        # An item line is either income or expenditure, the larger dimension is the amount
        entries = []
        for event_id, event in allocation.events:
            entries.append(entry(TYPE_ACTUAL, event_id, max(event.income_amount, event.expenditure_amount)))
            entries.append(entry(TYPE_PLANNED, event_id, max(event.budget_income_amount, event.budget_expenditure_amount)))

        # Guard on either remainder, amount is their max (may be 0 or negative)
        actual, planned = allocation.actual, allocation.planned
        if not actual.is_allocated:
            entries.append(entry(TYPE_ACTUAL, None, max(actual.income, actual.expenditure)))
        if not planned.is_allocated:
            entries.append(entry(TYPE_PLANNED, None, max(planned.income, planned.expenditure)))
        return entries
