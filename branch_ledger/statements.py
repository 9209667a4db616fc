"""
Statement Module

Assembles account statements as data: the monthly statement (postings of one
calendar month plus an interest line on the month's last day) and the full
"as of today" statement (every posting plus interest accrued to date).
Rendering is left to the shells.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional
import calendar

from .accrual import AccrualCalculator, AccrualResult
from .currency import ZERO
from .errors import InvalidDateRangeError, InvalidMonthError
from .ledger import LedgerStore, Transaction


INTEREST_LINE = "I"


@dataclass(frozen=True)
class StatementLine:
    """One row of a statement"""
    line_date: date
    transaction_id: str            # Empty for interest lines
    line_type: str                 # "D", "W" or "I"
    amount: Decimal
    balance: Decimal

    @classmethod
    def from_transaction(cls, txn: Transaction) -> 'StatementLine':
        return cls(
            line_date=txn.transaction_date,
            transaction_id=txn.transaction_id,
            line_type=txn.transaction_type.value,
            amount=txn.amount,
            balance=txn.balance
        )

    @property
    def is_interest(self) -> bool:
        return self.line_type == INTEREST_LINE


@dataclass
class MonthlyStatement:
    """Postings of one calendar month with the month's accrued interest"""
    account_id: str
    year: int
    month: int
    period_start: date
    period_end: date
    opening_balance: Decimal
    closing_balance: Decimal       # End-of-month balance before interest
    accrual: AccrualResult
    lines: List[StatementLine] = field(default_factory=list)

    @property
    def interest(self) -> Decimal:
        return self.accrual.amount

    @property
    def final_balance(self) -> Decimal:
        return self.closing_balance + self.interest


@dataclass
class AccountStatement:
    """Every posting of an account with interest accrued up to as_of"""
    account_id: str
    as_of: date
    balance: Decimal
    accrual: AccrualResult
    lines: List[StatementLine] = field(default_factory=list)

    @property
    def interest(self) -> Decimal:
        return self.accrual.amount

    @property
    def final_balance(self) -> Decimal:
        return self.balance + self.interest


def month_bounds(year: int, month: int):
    """
    First and last day of a calendar month

    Raises:
        InvalidMonthError: If month is outside 1-12
        InvalidDateRangeError: If year is outside the supported calendar
    """
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidMonthError(f"Month must be between 1 and 12, got {month!r}")
    if not isinstance(year, int) or not 1 <= year <= 9999:
        raise InvalidDateRangeError(f"Year must be between 1 and 9999, got {year!r}")

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class StatementGenerator:
    """
    Builds statements from the ledger store and the accrual calculator
    """

    def __init__(
        self,
        ledger: LedgerStore,
        calculator: AccrualCalculator,
        clock: Optional[Callable[[], date]] = None
    ):
        self.ledger = ledger
        self.calculator = calculator
        self.clock = clock or date.today

    def monthly_statement(self, account_id: str, year: int, month: int) -> MonthlyStatement:
        """
        Statement for one calendar month

        The interest line is always present, dated on the month's last day,
        with amount 0.00 when no rate applied.

        Raises:
            InvalidMonthError: If month is outside 1-12
            AccountNotFoundError: If account id is unregistered
        """
        period_start, period_end = month_bounds(year, month)
        account = self.ledger.require_account(account_id)
        reconstructor = self.calculator.reconstructor

        accrual = self.calculator.accrue(account, period_start, period_end)
        closing_balance = reconstructor.balance_at(account, period_end)

        lines = [
            StatementLine.from_transaction(txn)
            for txn in account.transactions_between(period_start, period_end)
        ]
        lines.append(StatementLine(
            line_date=period_end,
            transaction_id="",
            line_type=INTEREST_LINE,
            amount=accrual.amount,
            balance=closing_balance + accrual.amount
        ))

        return MonthlyStatement(
            account_id=account_id,
            year=year,
            month=month,
            period_start=period_start,
            period_end=period_end,
            opening_balance=reconstructor.opening_balance(account, period_start),
            closing_balance=closing_balance,
            accrual=accrual,
            lines=lines
        )

    def account_statement(self, account_id: str, as_of: Optional[date] = None) -> AccountStatement:
        """
        Full statement with interest accrued from the first posting to as_of

        Args:
            account_id: Account identifier
            as_of: Last accrual day, defaults to today

        Raises:
            AccountNotFoundError: If account id is unregistered
        """
        account = self.ledger.require_account(account_id)
        as_of = as_of or self.clock()

        first_date = account.first_transaction_date
        if first_date is not None and first_date <= as_of:
            accrual = self.calculator.accrue(account, first_date, as_of)
        else:
            accrual = AccrualResult(range_start=as_of, range_end=as_of, amount=ZERO)

        return AccountStatement(
            account_id=account_id,
            as_of=as_of,
            balance=account.balance,
            accrual=accrual,
            lines=[StatementLine.from_transaction(txn) for txn in account.transactions]
        )
