"""
Daily Balance Reconstruction Module

Rebuilds an account's end-of-day balance for every calendar day of a range
from its transaction history. The result never has gaps: days without
activity carry the previous day's balance forward.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict

from .currency import ZERO
from .errors import InvalidDateRangeError
from .ledger import Account


def check_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise InvalidDateRangeError(
            f"Range end {end_date.isoformat()} is before range start {start_date.isoformat()}"
        )


class DailyBalanceReconstructor:
    """
    Replays an account's postings into a day-by-day balance history
    """

    def opening_balance(self, account: Account, day: date) -> Decimal:
        """Balance carried into day: result of the last posting strictly before it"""
        previous = account.last_transaction_before(day)
        return previous.balance if previous else ZERO

    def balance_at(self, account: Account, day: date) -> Decimal:
        """End-of-day balance on day"""
        last = account.last_transaction_on_or_before(day)
        return last.balance if last else ZERO

    def daily_balances(self, account: Account, start_date: date, end_date: date) -> Dict[date, Decimal]:
        """
        End-of-day balance for every day in [start_date, end_date]

        Args:
            account: Account to replay
            start_date: First day of the range
            end_date: Last day of the range (inclusive)

        Returns:
            Date-ordered mapping with exactly one entry per calendar day

        Raises:
            InvalidDateRangeError: If end_date is before start_date
        """
        check_range(start_date, end_date)

        # Last posting of each day wins; postings come in (date, sequence) order
        closing_by_day: Dict[date, Decimal] = {}
        for txn in account.transactions_between(start_date, end_date):
            closing_by_day[txn.transaction_date] = txn.balance

        balances: Dict[date, Decimal] = {}
        balance = self.opening_balance(account, start_date)
        # end_date may be date.max, never step past it
        for offset in range((end_date - start_date).days + 1):
            day = start_date + timedelta(days=offset)
            balance = closing_by_day.get(day, balance)
            balances[day] = balance

        return balances
