"""Validation and editing of hand-made (custom) installment schedules"""

from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from billing_engine.domain.exceptions import AmountMismatch, IncompleteSchedule
from billing_engine.domain.installments import generate_installment_schedule
from billing_engine.domain.models import ScheduleEntry

_UNSET = object()


def renumber(entries: Iterable[ScheduleEntry]) -> List[ScheduleEntry]:
    """Copy entries, numbering them 1..N in their current order"""
    return [replace(entry, installment_number=i + 1) for i, entry in enumerate(entries)]


def validate_custom_schedule(
    amount_cents: int,
    entries: List[ScheduleEntry],
    count: Optional[int] = None,
) -> List[ScheduleEntry]:
    """
    Check a custom schedule against the service amount.

    Requirements:
    - At least one entry, and exactly `count` entries when count is given
    - Every entry has a due date and a positive amount
    - Amounts add up exactly to the service amount

    Returns:
        New entries renumbered 1..N in list order

    Raises:
        IncompleteSchedule: missing entries, due dates or amounts
        AmountMismatch: total differs from the service amount
    """
    if not entries:
        raise IncompleteSchedule("Schedule has no installments")

    if count is not None and len(entries) != count:
        raise IncompleteSchedule(f"Schedule has {len(entries)} installments, expected {count}")

    incomplete = [
        position + 1
        for position, entry in enumerate(entries)
        if entry.due_date is None or entry.amount_cents is None or entry.amount_cents <= 0
    ]
    if incomplete:
        raise IncompleteSchedule(
            "Every installment needs a due date and a positive amount "
            f"(installments {', '.join(str(n) for n in incomplete)})",
            incomplete,
        )

    total = sum(entry.amount_cents for entry in entries)
    if total != amount_cents:
        raise AmountMismatch(expected_cents=amount_cents, actual_cents=total)

    return renumber(entries)


class ScheduleBuilder:
    """Editable schedule: rows can be added, removed and changed, numbering stays contiguous"""

    def __init__(self, entries: Optional[Iterable[ScheduleEntry]] = None):
        self._entries: List[ScheduleEntry] = renumber(entries or [])

    @classmethod
    def from_generated(cls, amount_cents: int, count: int, first_due_date: date) -> "ScheduleBuilder":
        return cls(generate_installment_schedule(amount_cents, count, first_due_date))

    @property
    def entries(self) -> List[ScheduleEntry]:
        return [replace(entry) for entry in self._entries]

    @property
    def total_cents(self) -> int:
        return sum(entry.amount_cents or 0 for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self) -> ScheduleEntry:
        """Append an empty row; it must be filled in before validation passes"""
        entry = ScheduleEntry(installment_number=len(self._entries) + 1, amount_cents=0, due_date=None)
        self._entries.append(entry)
        return replace(entry)

    def remove(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"No installment at position {index}")
        del self._entries[index]
        self._entries = renumber(self._entries)

    def update(self, index: int, amount_cents=_UNSET, due_date=_UNSET) -> ScheduleEntry:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"No installment at position {index}")
        entry = self._entries[index]
        if amount_cents is not _UNSET:
            entry = replace(entry, amount_cents=amount_cents)
        if due_date is not _UNSET:
            entry = replace(entry, due_date=due_date)
        self._entries[index] = entry
        return replace(entry)

    def validate(self, amount_cents: int) -> List[ScheduleEntry]:
        return validate_custom_schedule(amount_cents, self._entries)
