"""
Interest Accrual Module

Computes simple daily interest for an account over an inclusive date range.
The range is split into accrual periods at every rate change; each period
contributes balance x rate/100 x days / basis and the sum is rounded once to
currency precision (half away from zero).
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .balances import DailyBalanceReconstructor, check_range
from .currency import ZERO, quantize_amount
from .interest import InterestRuleTimeline
from .ledger import Account


ONE_DAY = timedelta(days=1)
HUNDRED = Decimal('100')


class InterestCalculationMethod(Enum):
    """Day-count basis for the annual rate"""
    ACTUAL_365 = "actual_365"      # Actual days / 365
    ACTUAL_360 = "actual_360"      # Actual days / 360

    @property
    def days_in_year(self) -> Decimal:
        if self == InterestCalculationMethod.ACTUAL_360:
            return Decimal('360')
        return Decimal('365')


class BalanceSampling(Enum):
    """Which balance an accrual period earns interest on"""
    PERIOD_START = "period_start"  # End-of-day balance of the period's first day, held constant
    DAILY = "daily"                # Each day's own end-of-day balance


@dataclass(frozen=True)
class AccrualPeriod:
    """A maximal sub-range with a constant rate"""
    start_date: date
    end_date: date
    rule_id: str
    rate: Decimal
    balance: Decimal
    days: int
    interest: Decimal              # Unrounded contribution


@dataclass
class AccrualResult:
    """Rounded interest over a range and the periods it came from"""
    range_start: date
    range_end: date
    amount: Decimal = ZERO
    periods: List[AccrualPeriod] = field(default_factory=list)

    @property
    def unrounded_amount(self) -> Decimal:
        return sum((period.interest for period in self.periods), Decimal('0'))


class AccrualCalculator:
    """
    Joins an account's daily balances with the interest rule timeline
    """

    def __init__(
        self,
        timeline: InterestRuleTimeline,
        reconstructor: Optional[DailyBalanceReconstructor] = None,
        calculation_method: InterestCalculationMethod = InterestCalculationMethod.ACTUAL_365,
        balance_sampling: BalanceSampling = BalanceSampling.PERIOD_START
    ):
        self.timeline = timeline
        self.reconstructor = reconstructor or DailyBalanceReconstructor()
        self.calculation_method = calculation_method
        self.balance_sampling = balance_sampling

    def accrue(self, account: Account, range_start: date, range_end: date) -> AccrualResult:
        """
        Accrue simple interest over [range_start, range_end]

        Args:
            account: Account earning interest
            range_start: First day of the window
            range_end: Last day of the window (inclusive)

        Returns:
            AccrualResult with the rounded amount and the accrual periods

        Raises:
            InvalidDateRangeError: If range_end is before range_start
        """
        check_range(range_start, range_end)
        result = AccrualResult(range_start=range_start, range_end=range_end)

        if account.last_transaction_on_or_before(range_end) is None:
            return result
        if not self.timeline.has_rule_on_or_before(range_end):
            return result

        # Periods are inclusive on both ends; range_end may be date.max
        breakpoints = self.timeline.effective_dates_between(range_start, range_end)
        starts = [range_start] + breakpoints
        ends = [breakpoint - ONE_DAY for breakpoint in breakpoints] + [range_end]
        total = Decimal('0')

        for start, end in zip(starts, ends):
            rule = self.timeline.rule_as_of(start)
            if rule is None:
                continue
            period = self._accrue_period(account, start, end, rule.rule_id, rule.rate)
            result.periods.append(period)
            total += period.interest

        result.amount = quantize_amount(total)
        return result

    def _accrue_period(
        self,
        account: Account,
        start: date,
        end: date,
        rule_id: str,
        rate: Decimal
    ) -> AccrualPeriod:
        """Interest for [start, end] at a constant rate"""
        days = (end - start).days + 1
        opening = self.reconstructor.balance_at(account, start)
        divisor = HUNDRED * self.calculation_method.days_in_year

        if self.balance_sampling == BalanceSampling.DAILY:
            balances = self.reconstructor.daily_balances(account, start, end)
            interest = sum(balances.values(), Decimal('0')) * rate / divisor
        else:
            interest = opening * rate * days / divisor

        return AccrualPeriod(
            start_date=start,
            end_date=end,
            rule_id=rule_id,
            rate=rate,
            balance=opening,
            days=days,
            interest=interest
        )
