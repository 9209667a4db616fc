"""
Test suite for interest accrual

Tests the split of a range at rate changes, the balance each period earns on,
day-count bases and the single rounding of the total.
"""

import pytest
from decimal import Decimal
from datetime import date

from branch_ledger.accrual import AccrualCalculator, BalanceSampling, InterestCalculationMethod
from branch_ledger.errors import InvalidDateRangeError
from branch_ledger.interest import InterestRuleTimeline
from branch_ledger.ledger import LedgerStore
from branch_ledger.transactions import TransactionProcessor


class AccrualTestCase:
    """Shared fixtures for accrual tests"""

    def setup_method(self):
        """Set up test fixtures"""
        self.ledger = LedgerStore()
        self.processor = TransactionProcessor(self.ledger)
        self.timeline = InterestRuleTimeline()
        self.calculator = AccrualCalculator(self.timeline)

    def deposit(self, day, amount, account_id="AC001"):
        self.processor.apply(day, account_id, "D", amount)
        return self.ledger.require_account(account_id)

    def load_june_example(self):
        self.timeline.set_rule(date(2023, 1, 1), "RULE01", "1.95")
        self.timeline.set_rule(date(2023, 5, 20), "RULE02", "1.90")
        self.timeline.set_rule(date(2023, 6, 15), "RULE03", "2.20")

        self.processor.apply(date(2023, 5, 5), "AC001", "D", "100.00")
        self.processor.apply(date(2023, 6, 1), "AC001", "D", "150.00")
        self.processor.apply(date(2023, 6, 26), "AC001", "W", "20.00")
        self.processor.apply(date(2023, 6, 26), "AC001", "W", "100.00")
        return self.ledger.require_account("AC001")


class TestAccrualPeriods(AccrualTestCase):
    """Test how a range is split into accrual periods"""

    def test_june_example(self):
        """Test a month with a mid-month rate change"""
        account = self.load_june_example()
        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))

        assert result.amount == Decimal('0.42')
        assert [(p.rule_id, p.days) for p in result.periods] == [("RULE02", 14), ("RULE03", 16)]
        assert result.periods[0].start_date == date(2023, 6, 1)
        assert result.periods[0].end_date == date(2023, 6, 14)
        assert result.periods[1].start_date == date(2023, 6, 15)
        assert result.periods[1].end_date == date(2023, 6, 30)
        # Both periods hold the balance of their first day
        assert [p.balance for p in result.periods] == [Decimal('250.00'), Decimal('250.00')]

    def test_days_cover_the_range(self):
        """Test that period day counts add up to the range length"""
        account = self.load_june_example()
        result = self.calculator.accrue(account, date(2023, 5, 1), date(2023, 6, 30))

        assert sum(p.days for p in result.periods) == 61
        assert [p.rule_id for p in result.periods] == ["RULE01", "RULE02", "RULE03"]

    def test_rule_starting_mid_range(self):
        """Test that days before the first rule earn nothing"""
        account = self.deposit(date(2023, 6, 1), "1000.00")
        self.timeline.set_rule(date(2023, 6, 11), "RULE01", "3.65")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))

        assert len(result.periods) == 1
        assert result.periods[0].days == 20
        assert result.amount == Decimal('2.00')

    def test_rule_on_range_end(self):
        """Test that a rule effective on the last day gives a one-day period"""
        account = self.deposit(date(2023, 6, 1), "1000.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "1.00")
        self.timeline.set_rule(date(2023, 6, 30), "RULE02", "2.00")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))
        assert [(p.rule_id, p.days) for p in result.periods] == [("RULE01", 29), ("RULE02", 1)]

    def test_rule_before_range_applies(self):
        """Test that the rule in effect at range start carries into the range"""
        account = self.deposit(date(2023, 1, 1), "1000.00")
        self.timeline.set_rule(date(2022, 1, 1), "RULE01", "3.65")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 10))
        assert result.periods[0].rule_id == "RULE01"
        assert result.amount == Decimal('1.00')

    def test_no_rule(self):
        """Test that no interest accrues without a rule"""
        account = self.deposit(date(2023, 6, 1), "1000.00")
        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))

        assert result.amount == Decimal('0.00')
        assert result.periods == []

    def test_rules_only_after_range(self):
        """Test that a rule effective after the range is ignored"""
        account = self.deposit(date(2023, 6, 1), "1000.00")
        self.timeline.set_rule(date(2023, 7, 1), "RULE01", "3.65")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))
        assert result.amount == Decimal('0.00')

    def test_no_transactions_in_range(self):
        """Test an account whose first posting is after the range"""
        account = self.deposit(date(2023, 7, 1), "1000.00")
        self.timeline.set_rule(date(2023, 1, 1), "RULE01", "3.65")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))
        assert result.amount == Decimal('0.00')
        assert result.periods == []

    def test_invalid_range(self):
        """Test that end before start is rejected"""
        account = self.deposit(date(2023, 6, 1), "1000.00")
        with pytest.raises(InvalidDateRangeError):
            self.calculator.accrue(account, date(2023, 6, 30), date(2023, 6, 1))


class TestAccrualAmounts(AccrualTestCase):
    """Test interest amounts and rounding"""

    def test_single_day(self):
        """Test interest for one day"""
        account = self.deposit(date(2023, 6, 1), "1000.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "3.65")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 1))
        assert result.amount == Decimal('0.10')

    def test_thirty_days(self):
        """Test 100 at 1.95% over 30 days"""
        account = self.deposit(date(2023, 6, 1), "100.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "1.95")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))
        assert result.amount == Decimal('0.16')

    def test_total_is_rounded_once(self):
        """Test that sub-cent period amounts are summed before rounding"""
        account = self.deposit(date(2023, 6, 1), "100.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "1.46")
        self.timeline.set_rule(date(2023, 6, 2), "RULE02", "1.46")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 2))

        assert len(result.periods) == 2
        assert all(p.interest == Decimal('0.004') for p in result.periods)
        assert result.unrounded_amount == Decimal('0.008')
        assert result.amount == Decimal('0.01')

    def test_half_rounds_up(self):
        """Test that an exact half cent rounds away from zero"""
        account = self.deposit(date(2023, 6, 1), "100.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "1.825")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 1))
        assert result.unrounded_amount == Decimal('0.005')
        assert result.amount == Decimal('0.01')

    def test_actual_360(self):
        """Test the 360-day basis"""
        calculator = AccrualCalculator(
            self.timeline, calculation_method=InterestCalculationMethod.ACTUAL_360
        )
        account = self.deposit(date(2023, 6, 1), "1000.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "3.6")

        result = calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 10))
        assert result.amount == Decimal('1.00')

    def test_interest_reflects_backdated_posting(self):
        """Test that accrual uses the history as it stands now"""
        account = self.deposit(date(2023, 6, 20), "1000.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "3.65")
        before = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))

        self.processor.apply(date(2023, 6, 1), "AC001", "D", "1000.00")
        after = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))

        assert before.amount == Decimal('0.00')
        assert after.amount == Decimal('3.00')


class TestBalanceSampling(AccrualTestCase):
    """Test which balance an accrual period earns interest on"""

    def test_period_start_holds_balance(self):
        """Test that changes inside a period do not alter its balance"""
        account = self.deposit(date(2023, 6, 1), "100.00")
        self.processor.apply(date(2023, 6, 10), "AC001", "D", "900.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "3.65")

        result = self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))

        assert result.periods[0].balance == Decimal('100.00')
        assert result.amount == Decimal('0.30')

    def test_daily_sampling(self):
        """Test that daily sampling follows each day's balance"""
        calculator = AccrualCalculator(self.timeline, balance_sampling=BalanceSampling.DAILY)
        account = self.deposit(date(2023, 6, 1), "100.00")
        self.processor.apply(date(2023, 6, 10), "AC001", "D", "900.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "3.65")

        result = calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))
        assert result.amount == Decimal('2.19')

    def test_june_example_daily(self):
        """Test the mid-month withdrawal with daily sampling"""
        calculator = AccrualCalculator(self.timeline, balance_sampling=BalanceSampling.DAILY)
        account = self.load_june_example()

        result = calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30))
        assert result.amount == Decimal('0.39')

    def test_zero_balance_at_period_start(self):
        """Test an account funded after the period starts"""
        account = self.deposit(date(2023, 6, 10), "1000.00")
        self.timeline.set_rule(date(2023, 6, 1), "RULE01", "3.65")
        daily = AccrualCalculator(self.timeline, balance_sampling=BalanceSampling.DAILY)

        assert self.calculator.accrue(account, date(2023, 6, 1), date(2023, 6, 30)).amount == Decimal('0.00')
        assert daily.accrue(account, date(2023, 6, 1), date(2023, 6, 30)).amount == Decimal('2.10')

    def test_range_ending_on_last_calendar_day(self):
        """Test accrual through date.max with both sampling policies"""
        account = self.deposit(date(9999, 12, 1), "100.00")
        self.timeline.set_rule(date(9999, 12, 1), "RULE01", "2")
        self.timeline.set_rule(date(9999, 12, 31), "RULE02", "2")
        daily = AccrualCalculator(self.timeline, balance_sampling=BalanceSampling.DAILY)

        result = self.calculator.accrue(account, date(9999, 12, 1), date(9999, 12, 31))

        assert [(p.days, p.end_date) for p in result.periods] == [
            (30, date(9999, 12, 30)), (1, date(9999, 12, 31))
        ]
        assert result.amount == Decimal('0.17')
        assert daily.accrue(account, date(9999, 12, 1), date(9999, 12, 31)).amount == Decimal('0.17')
