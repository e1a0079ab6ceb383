"""
bankcore.ledger
Bounded, newest-first transaction log.

A Ledger is a short-lived working copy used while one turn is resolved. It is
seeded from the state's transactions, stamps new lines with the calendar it
was opened with, and hands back both the bounded list and this turn's delta.
"""

from __future__ import annotations

from typing import Iterable, List

from .modifiers import LEDGER_CAP
from .state import Transaction, TransactionType


class Ledger:
    def __init__(
        self,
        existing: Iterable[Transaction],
        *,
        turn: int,
        week: int,
        month: int,
        year: int,
        cap: int = LEDGER_CAP,
    ) -> None:
        self._entries: List[Transaction] = list(existing)[:cap]
        self._delta: List[Transaction] = []
        self._cap = int(cap)
        self._next_id = max((t.id for t in self._entries), default=0) + 1
        self.turn = int(turn)
        self.week = int(week)
        self.month = int(month)
        self.year = int(year)

    def post(self, description: str, type: TransactionType, amount: float) -> Transaction:
        entry = Transaction(
            id=self._next_id,
            turn=self.turn,
            week=self.week,
            month=self.month,
            year=self.year,
            description=str(description),
            type=type,
            amount=float(amount),
        )
        self._next_id += 1
        self._entries = [entry, *self._entries][: self._cap]
        self._delta.append(entry)
        return entry

    @property
    def entries(self) -> List[Transaction]:
        """Newest first, at most `cap` long."""
        return list(self._entries)

    @property
    def delta(self) -> List[Transaction]:
        """Lines posted through this ledger, in posting order."""
        return list(self._delta)

    def __len__(self) -> int:
        return len(self._entries)
