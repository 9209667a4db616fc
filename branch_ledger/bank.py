"""
Bank Context Module

The explicitly constructed context that owns one ledger store and one
interest rule timeline and exposes the ledger API to shells. Independent
Bank instances share no state.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Union

from .accrual import (
    AccrualCalculator, AccrualResult, BalanceSampling, InterestCalculationMethod
)
from .balances import DailyBalanceReconstructor, check_range
from .config import LedgerConfig, get_config
from .currency import Numeric
from .errors import InvalidDateRangeError
from .interest import InterestRule, InterestRuleTimeline
from .ledger import LedgerStore, Transaction, TransactionType
from .logging_config import get_logger, log_action
from .statements import AccountStatement, MonthlyStatement, StatementGenerator
from .transactions import TransactionProcessor, as_date


class Bank:
    """
    Single-branch ledger with transactions, interest rules and statements
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        clock: Optional[Callable[[], date]] = None
    ):
        self.config = config or get_config()
        self.logger = get_logger("branch_ledger.bank")

        self.ledger = LedgerStore()
        self.timeline = InterestRuleTimeline()
        self.transaction_processor = TransactionProcessor(
            self.ledger, sequence_width=self.config.transaction_sequence_width
        )
        self.reconstructor = DailyBalanceReconstructor()
        self.calculator = AccrualCalculator(
            self.timeline,
            self.reconstructor,
            calculation_method=InterestCalculationMethod(self.config.interest_calculation_method),
            balance_sampling=BalanceSampling(self.config.interest_balance_sampling)
        )
        self.statements = StatementGenerator(self.ledger, self.calculator, clock=clock)

    @property
    def today(self) -> date:
        return self.statements.clock()

    # Transactions

    def apply(
        self,
        transaction_date: Union[date, datetime],
        account_id: str,
        kind: Union[TransactionType, str],
        amount: Numeric
    ) -> Transaction:
        """Apply a deposit or withdrawal, see TransactionProcessor.apply"""
        transaction = self.transaction_processor.apply(transaction_date, account_id, kind, amount)

        log_action(
            self.logger, "info", f"Transaction applied: {transaction.transaction_type.label}",
            account_id=account_id, action="apply_transaction",
            resource=f"transaction:{transaction.transaction_id}",
            extra={
                "transaction_date": transaction.transaction_date.isoformat(),
                "amount": str(transaction.amount),
                "balance": str(transaction.balance)
            }
        )
        return transaction

    def get_transactions(self, account_id: str) -> List[Transaction]:
        """Transactions in date order, ties by sequence"""
        return self.ledger.get_transactions(account_id)

    def get_balance(self, account_id: str) -> Decimal:
        return self.ledger.get_balance(account_id)

    def has_account(self, account_id: str) -> bool:
        return account_id in self.ledger

    def account_ids(self) -> List[str]:
        return self.ledger.account_ids()

    # Interest rules

    def set_rule(
        self,
        effective_date: Union[date, datetime],
        rule_id: str,
        rate: Numeric
    ) -> InterestRule:
        """Add or replace the interest rule effective on effective_date"""
        replaced = self.timeline.get_rule(as_date(effective_date))
        rule = self.timeline.set_rule(effective_date, rule_id, rate)

        log_action(
            self.logger, "info",
            "Interest rule replaced" if replaced else "Interest rule added",
            action="set_interest_rule", resource=f"interest_rule:{rule.rule_id}",
            extra={
                "effective_date": rule.effective_date.isoformat(),
                "rate": str(rule.rate),
                "replaced_rule_id": replaced.rule_id if replaced else None
            }
        )
        return rule

    def list_rules(self) -> List[InterestRule]:
        return self.timeline.list_all()

    # Balances and interest

    def daily_balances(self, account_id: str, start_date: date, end_date: date) -> Dict[date, Decimal]:
        """
        End-of-day balance for every day in [start_date, end_date]

        Raises:
            AccountNotFoundError: If account id is unregistered
            InvalidDateRangeError: If the range is reversed or longer than
                max_daily_balance_days
        """
        account = self.ledger.require_account(account_id)
        check_range(start_date, end_date)
        days = (end_date - start_date).days + 1
        if days > self.config.max_daily_balance_days:
            raise InvalidDateRangeError(
                f"Range of {days} days exceeds the limit of {self.config.max_daily_balance_days} days"
            )
        return self.reconstructor.daily_balances(account, start_date, end_date)

    def accrue(self, account_id: str, range_start: date, range_end: date) -> AccrualResult:
        """Interest accrued over [range_start, range_end]"""
        account = self.ledger.require_account(account_id)
        result = self.calculator.accrue(account, range_start, range_end)

        log_action(
            self.logger, "debug", "Interest accrued",
            account_id=account_id, action="accrue_interest",
            extra={
                "range_start": range_start.isoformat(),
                "range_end": range_end.isoformat(),
                "amount": str(result.amount),
                "periods": len(result.periods)
            }
        )
        return result

    # Statements

    def monthly_statement(self, account_id: str, year: int, month: int) -> MonthlyStatement:
        statement = self.statements.monthly_statement(account_id, year, month)

        log_action(
            self.logger, "info", "Monthly statement generated",
            account_id=account_id, action="monthly_statement",
            extra={"period": f"{year:04d}-{month:02d}", "interest": str(statement.interest)}
        )
        return statement

    def account_statement(self, account_id: str, as_of: Optional[date] = None) -> AccountStatement:
        statement = self.statements.account_statement(account_id, as_of)

        log_action(
            self.logger, "debug", "Account statement generated",
            account_id=account_id, action="account_statement",
            extra={"as_of": statement.as_of.isoformat(), "interest": str(statement.interest)}
        )
        return statement
