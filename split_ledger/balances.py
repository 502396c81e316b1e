"""
Balance Store Module

Durable mapping of (account, denom) to a non-negative integer amount.
Absent entries read as zero; entries driven to zero are deleted.

Mutations go through a BalanceBatch: every credit and debit is validated
against the running staged balance when it is staged, and nothing touches
storage until commit() writes all pending entries in one transaction.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .coins import Coin, checked_add
from .errors import InsufficientFunds, InvalidAmount
from .storage import StorageInterface


BalanceKey = Tuple[str, str]


def balance_key(account: str, denom: str) -> str:
    """Unambiguous storage id for an (account, denom) pair"""
    return json.dumps([account, denom], separators=(',', ':'))


@dataclass(frozen=True)
class BalanceEntry:
    """Amount of one denomination attributed to one account"""
    account: str
    denom: str
    amount: int

    def to_dict(self) -> Dict[str, str]:
        return {"account": self.account, "denom": self.denom, "amount": str(self.amount)}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'BalanceEntry':
        return cls(account=data["account"], denom=data["denom"], amount=int(data["amount"]))


class BalanceBatch:
    """
    Arena of pending balance writes, applied in one commit step.

    A batch is single-use: after commit() it refuses further staging.
    Discarding a batch without committing leaves storage untouched.
    """

    def __init__(self, store: 'BalanceStore'):
        self._store = store
        self._pending: Dict[BalanceKey, int] = {}
        self._committed = False

    def _check_open(self) -> None:
        if self._committed:
            raise RuntimeError("Balance batch already committed")

    def get(self, account: str, denom: str) -> int:
        """Staged balance if this batch touched the entry, stored balance otherwise"""
        key = (account, denom)
        if key in self._pending:
            return self._pending[key]
        return self._store.get(account, denom)

    def credit(self, account: str, denom: str, amount: int) -> int:
        """Stage a credit; zero credits are not staged. Returns the new balance."""
        self._check_open()
        if amount < 0:
            raise InvalidAmount(amount, "credit amount cannot be negative")
        current = self.get(account, denom)
        if amount == 0:
            return current
        new_balance = checked_add(current, amount, denom=denom, account=account)
        self._pending[(account, denom)] = new_balance
        return new_balance

    def debit(self, account: str, denom: str, amount: int) -> int:
        """Stage a debit. Returns the new balance."""
        self._check_open()
        if amount < 0:
            raise InvalidAmount(amount, "debit amount cannot be negative")
        current = self.get(account, denom)
        if amount > current:
            raise InsufficientFunds(account, denom, balance=current, requested=amount)
        if amount == 0:
            return current
        self._pending[(account, denom)] = current - amount
        return current - amount

    @property
    def pending(self) -> Dict[BalanceKey, int]:
        """Copy of the staged (account, denom) -> new balance map"""
        return dict(self._pending)

    def commit(self) -> None:
        """Write every staged entry inside one storage transaction"""
        self._check_open()
        with self._store.storage.atomic():
            for (account, denom), amount in self._pending.items():
                self._store._write(account, denom, amount)
        self._committed = True


class BalanceStore:
    """
    Balance store over a StorageInterface table
    """

    def __init__(self, storage: StorageInterface, table_name: str = "balances"):
        self.storage = storage
        self.table_name = table_name

    def get(self, account: str, denom: str) -> int:
        """Current balance; 0 when no entry exists"""
        data = self.storage.load(self.table_name, balance_key(account, denom))
        if data:
            return BalanceEntry.from_dict(data).amount
        return 0

    def credit(self, account: str, denom: str, amount: int) -> int:
        """Credit one entry as its own atomic step"""
        batch = self.batch()
        new_balance = batch.credit(account, denom, amount)
        batch.commit()
        return new_balance

    def debit(self, account: str, denom: str, amount: int) -> int:
        """Debit one entry as its own atomic step"""
        batch = self.batch()
        new_balance = batch.debit(account, denom, amount)
        batch.commit()
        return new_balance

    def batch(self) -> BalanceBatch:
        """Start staging a multi-entry update"""
        return BalanceBatch(self)

    def balances_for(self, account: str) -> List[Coin]:
        """All non-zero balances of an account, sorted by denom"""
        entries = [
            BalanceEntry.from_dict(data)
            for data in self.storage.find(self.table_name, {"account": account})
        ]
        return [
            Coin(denom=e.denom, amount=e.amount)
            for e in sorted(entries, key=lambda e: e.denom)
            if e.amount > 0
        ]

    def entry(self, account: str, denom: str) -> Optional[BalanceEntry]:
        """Stored entry, or None if absent"""
        data = self.storage.load(self.table_name, balance_key(account, denom))
        return BalanceEntry.from_dict(data) if data else None

    def _write(self, account: str, denom: str, amount: int) -> None:
        record_id = balance_key(account, denom)
        if amount == 0:
            self.storage.delete(self.table_name, record_id)
        else:
            self.storage.save(self.table_name, record_id, BalanceEntry(account, denom, amount).to_dict())
