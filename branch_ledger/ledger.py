"""
Ledger Store Module

Owns the mapping from account id to account state. Each account keeps its
transactions in (date, sequence) order as an insertion invariant, so reads
never re-sort and date lookups are binary searches.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple
import sys

from .currency import ZERO
from .errors import AccountNotFoundError, InvalidKindError


# Sequence numbers start at 1, so (day, 0) sorts before every posting on day
# and (day, _END_OF_DAY) after every posting on day.
_END_OF_DAY = sys.maxsize

SortKey = Tuple[date, int]


class TransactionType(Enum):
    """Kinds of account postings"""
    DEPOSIT = "D"
    WITHDRAWAL = "W"

    @classmethod
    def from_value(cls, value) -> 'TransactionType':
        """Accept a TransactionType or its single-character code in any case"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            code = value.strip().upper()
            for member in cls:
                if member.value == code:
                    return member
        raise InvalidKindError(f"Transaction type must be 'D' or 'W', got {value!r}")

    @property
    def label(self) -> str:
        return "Deposit" if self is TransactionType.DEPOSIT else "Withdrawal"


@dataclass(frozen=True)
class Transaction:
    """
    Immutable posting against one account.

    balance is the account balance right after this posting when the
    account's transactions are replayed in sort_key order.

    transaction_id strings sort in posting order only while the sequence
    fits the configured padding (99 postings a day at the default width 2;
    "20230626-100" sorts before "20230626-99" as text). Order by sort_key,
    never by the id string.
    """
    transaction_date: date
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    balance: Decimal
    transaction_id: str
    sequence: int

    @property
    def sort_key(self) -> SortKey:
        return (self.transaction_date, self.sequence)

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this posting on the balance"""
        if self.transaction_type == TransactionType.DEPOSIT:
            return self.amount
        return -self.amount


@dataclass
class Account:
    """
    Account state: current balance and date-ordered transaction history
    """
    account_id: str
    balance: Decimal = ZERO
    _transactions: List[Transaction] = field(default_factory=list, repr=False)
    _keys: List[SortKey] = field(default_factory=list, repr=False)

    @property
    def transactions(self) -> List[Transaction]:
        """Transactions in date order, ties by sequence"""
        return list(self._transactions)

    @property
    def first_transaction_date(self) -> Optional[date]:
        if not self._transactions:
            return None
        return self._transactions[0].transaction_date

    def __len__(self) -> int:
        return len(self._transactions)

    def insertion_index(self, key: SortKey) -> int:
        """Position a posting with this key would take"""
        return bisect_right(self._keys, key)

    def balance_before_index(self, index: int) -> Decimal:
        """Balance immediately before the posting at index"""
        if index == 0:
            return ZERO
        return self._transactions[index - 1].balance

    def transactions_from_index(self, index: int) -> List[Transaction]:
        return self._transactions[index:]

    def post(self, transaction: Transaction) -> None:
        """
        Insert a transaction in date order.

        Postings dated after the new one are re-snapshotted with their
        balances shifted by the new posting's effect. Callers validate first;
        this method does not check the balance floor.
        """
        if transaction.account_id != self.account_id:
            raise ValueError(
                f"Transaction for {transaction.account_id} posted to {self.account_id}"
            )

        index = self.insertion_index(transaction.sort_key)
        delta = transaction.signed_amount

        for position in range(index, len(self._transactions)):
            later = self._transactions[position]
            self._transactions[position] = replace(later, balance=later.balance + delta)

        self._transactions.insert(index, transaction)
        self._keys.insert(index, transaction.sort_key)
        self.balance = self.balance + delta

    def last_transaction_before(self, day: date) -> Optional[Transaction]:
        """Latest transaction dated strictly before day"""
        index = bisect_left(self._keys, (day, 0))
        if index == 0:
            return None
        return self._transactions[index - 1]

    def last_transaction_on_or_before(self, day: date) -> Optional[Transaction]:
        """Latest transaction dated on or before day"""
        index = bisect_right(self._keys, (day, _END_OF_DAY))
        if index == 0:
            return None
        return self._transactions[index - 1]

    def transactions_between(self, start: date, end: date) -> List[Transaction]:
        """Transactions dated in [start, end], in order"""
        lo = bisect_left(self._keys, (start, 0))
        hi = bisect_right(self._keys, (end, _END_OF_DAY))
        return self._transactions[lo:hi]


class LedgerStore:
    """
    In-memory account registry. Accounts are created lazily and never deleted.
    """

    def __init__(self):
        self._accounts: Dict[str, Account] = {}

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(list(self._accounts.values()))

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by id, None if unregistered"""
        return self._accounts.get(account_id)

    def require_account(self, account_id: str) -> Account:
        """
        Get account by id

        Raises:
            AccountNotFoundError: If account id is unregistered
        """
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def open_account(self, account_id: str) -> Account:
        """Return the account, creating it with zero balance if needed"""
        account = self._accounts.get(account_id)
        if account is None:
            account = Account(account_id=account_id)
            self._accounts[account_id] = account
        return account

    def account_ids(self) -> List[str]:
        return sorted(self._accounts)

    def get_transactions(self, account_id: str) -> List[Transaction]:
        return self.require_account(account_id).transactions

    def get_balance(self, account_id: str) -> Decimal:
        return self.require_account(account_id).balance
