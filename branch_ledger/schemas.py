"""
Pydantic schemas for API requests and responses

Decimal values travel as strings so no precision is lost to JSON floats.
"""

import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .accrual import AccrualPeriod, AccrualResult
from .currency import format_amount
from .interest import InterestRule
from .ledger import Transaction
from .statements import AccountStatement, MonthlyStatement, StatementLine


# Requests

class TransactionRequest(BaseModel):
    date: datetime.date
    account_id: str = Field(..., min_length=1)
    type: str = Field(..., description="D for deposit, W for withdrawal")
    amount: str = Field(..., description="Decimal amount as string, at most 2 decimal places")


class InterestRuleRequest(BaseModel):
    date: datetime.date
    rule_id: str = Field(..., min_length=1)
    rate: str = Field(..., description="Annual rate in percent as string, between 0 and 100 exclusive")


# Responses

class TransactionModel(BaseModel):
    transaction_id: str
    date: datetime.date
    account_id: str
    type: str
    amount: str
    balance: str

    @classmethod
    def from_transaction(cls, txn: Transaction) -> 'TransactionModel':
        return cls(
            transaction_id=txn.transaction_id,
            date=txn.transaction_date,
            account_id=txn.account_id,
            type=txn.transaction_type.value,
            amount=format_amount(txn.amount),
            balance=format_amount(txn.balance)
        )


class InterestRuleModel(BaseModel):
    date: datetime.date
    rule_id: str
    rate: str

    @classmethod
    def from_rule(cls, rule: InterestRule) -> 'InterestRuleModel':
        return cls(date=rule.effective_date, rule_id=rule.rule_id, rate=str(rule.rate))


class DailyBalanceModel(BaseModel):
    date: datetime.date
    balance: str


class AccrualPeriodModel(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    rule_id: str
    rate: str
    balance: str
    days: int
    interest: str

    @classmethod
    def from_period(cls, period: AccrualPeriod) -> 'AccrualPeriodModel':
        return cls(
            start_date=period.start_date,
            end_date=period.end_date,
            rule_id=period.rule_id,
            rate=str(period.rate),
            balance=format_amount(period.balance),
            days=period.days,
            interest=str(period.interest)
        )


class AccrualModel(BaseModel):
    account_id: str
    range_start: datetime.date
    range_end: datetime.date
    amount: str
    periods: List[AccrualPeriodModel] = []

    @classmethod
    def from_result(cls, account_id: str, result: AccrualResult) -> 'AccrualModel':
        return cls(
            account_id=account_id,
            range_start=result.range_start,
            range_end=result.range_end,
            amount=format_amount(result.amount),
            periods=[AccrualPeriodModel.from_period(p) for p in result.periods]
        )


class StatementLineModel(BaseModel):
    date: datetime.date
    transaction_id: Optional[str] = None
    type: str
    amount: str
    balance: str

    @classmethod
    def from_line(cls, line: StatementLine) -> 'StatementLineModel':
        return cls(
            date=line.line_date,
            transaction_id=line.transaction_id or None,
            type=line.line_type,
            amount=format_amount(line.amount),
            balance=format_amount(line.balance)
        )


class MonthlyStatementModel(BaseModel):
    account_id: str
    year: int
    month: int
    opening_balance: str
    interest: str
    final_balance: str
    lines: List[StatementLineModel] = []

    @classmethod
    def from_statement(cls, statement: MonthlyStatement) -> 'MonthlyStatementModel':
        return cls(
            account_id=statement.account_id,
            year=statement.year,
            month=statement.month,
            opening_balance=format_amount(statement.opening_balance),
            interest=format_amount(statement.interest),
            final_balance=format_amount(statement.final_balance),
            lines=[StatementLineModel.from_line(line) for line in statement.lines]
        )


class AccountStatementModel(BaseModel):
    account_id: str
    as_of: datetime.date
    balance: str
    interest: str
    final_balance: str
    lines: List[StatementLineModel] = []

    @classmethod
    def from_statement(cls, statement: AccountStatement) -> 'AccountStatementModel':
        return cls(
            account_id=statement.account_id,
            as_of=statement.as_of,
            balance=format_amount(statement.balance),
            interest=format_amount(statement.interest),
            final_balance=format_amount(statement.final_balance),
            lines=[StatementLineModel.from_line(line) for line in statement.lines]
        )
