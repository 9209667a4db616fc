"""
Interest Rule Timeline Module

Owns the interest rules of the branch: at most one rule per effective date,
kept sorted by date. The rate in effect on a day is the rate of the latest
rule effective on or before it.
"""

from bisect import bisect_right, insort
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Union

from .currency import Numeric, to_decimal
from .errors import InvalidRateError
from .transactions import as_date


MIN_RATE = Decimal('0')      # exclusive
MAX_RATE = Decimal('100')    # exclusive


def validate_rate(rate: Numeric) -> Decimal:
    """
    Validate an annual rate given as a percentage

    Raises:
        InvalidRateError: If rate is not a number strictly between 0 and 100
    """
    try:
        value = to_decimal(rate)
    except ValueError as e:
        raise InvalidRateError(str(e))

    if value <= MIN_RATE or value >= MAX_RATE:
        raise InvalidRateError("Interest rate must be greater than 0 and less than 100.")
    return value


@dataclass(frozen=True)
class InterestRule:
    """Annual rate (percent) effective from effective_date until superseded"""
    effective_date: date
    rule_id: str
    rate: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'rate', validate_rate(self.rate))


class InterestRuleTimeline:
    """
    Date-ordered interest rules with "rate as of" lookups
    """

    def __init__(self):
        self._dates: List[date] = []
        self._rules: Dict[date, InterestRule] = {}

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self) -> Iterator[InterestRule]:
        return iter(self.list_all())

    def __bool__(self) -> bool:
        return bool(self._dates)

    def set_rule(
        self,
        effective_date: Union[date, datetime],
        rule_id: str,
        rate: Numeric
    ) -> InterestRule:
        """
        Add a rule, replacing any rule already effective on the same date

        Raises:
            InvalidRateError: If rate is outside (0, 100)
        """
        effective_date = as_date(effective_date)
        rule = InterestRule(effective_date=effective_date, rule_id=rule_id, rate=rate)

        if effective_date not in self._rules:
            insort(self._dates, effective_date)
        self._rules[effective_date] = rule
        return rule

    def rule_as_of(self, day: date) -> Optional[InterestRule]:
        """Latest rule effective on or before day"""
        index = bisect_right(self._dates, day)
        if index == 0:
            return None
        return self._rules[self._dates[index - 1]]

    def rate_as_of(self, day: date) -> Optional[Decimal]:
        """Rate in effect on day, None if no rule applies yet"""
        rule = self.rule_as_of(day)
        return rule.rate if rule else None

    def effective_dates_between(self, start: date, end: date) -> List[date]:
        """Rule effective dates in the half-open range (start, end]"""
        lo = bisect_right(self._dates, start)
        hi = bisect_right(self._dates, end)
        return self._dates[lo:hi]

    def has_rule_on_or_before(self, day: date) -> bool:
        return bisect_right(self._dates, day) > 0

    def get_rule(self, effective_date: date) -> Optional[InterestRule]:
        return self._rules.get(effective_date)

    def list_all(self) -> List[InterestRule]:
        """All rules, ascending by effective date"""
        return [self._rules[d] for d in self._dates]

