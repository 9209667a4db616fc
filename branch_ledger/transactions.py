"""
Transaction Processing Module

Validates and applies deposits and withdrawals against the ledger store.
Every posting gets a transaction id unique within its calendar date
(YYYYMMDD-NN). Validation completes before any state changes, so a failed
posting leaves the ledger untouched.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Union

from .currency import ZERO, Numeric, has_currency_precision, quantize_amount, to_decimal
from .errors import (
    FirstTransactionMustBeDepositError, InsufficientBalanceError,
    InvalidAmountError, LedgerError
)
from .ledger import LedgerStore, Transaction, TransactionType


def as_date(value: Union[date, datetime]) -> date:
    """Drop any time component, postings have day granularity"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def validate_amount(amount: Numeric) -> Decimal:
    """
    Validate a posting amount

    Raises:
        InvalidAmountError: If amount is not a positive number with at most
            2 fractional digits
    """
    try:
        value = to_decimal(amount)
    except ValueError as e:
        raise InvalidAmountError(str(e))

    if value <= 0:
        raise InvalidAmountError("Amount must be greater than zero.")
    if not has_currency_precision(value):
        raise InvalidAmountError("Amount can have maximum 2 decimal places.")
    return quantize_amount(value)


class TransactionProcessor:
    """
    Applies single postings to a LedgerStore
    """

    def __init__(self, ledger: LedgerStore, sequence_width: int = 2):
        self.ledger = ledger
        self.sequence_width = sequence_width
        self._daily_sequence: Dict[date, int] = {}

    def next_transaction_id(self, transaction_date: date) -> str:
        """Id the next posting on transaction_date would receive"""
        sequence = self._daily_sequence.get(transaction_date, 0) + 1
        return self._format_id(transaction_date, sequence)

    def _format_id(self, transaction_date: date, sequence: int) -> str:
        return f"{transaction_date:%Y%m%d}-{sequence:0{self.sequence_width}d}"

    def apply(
        self,
        transaction_date: Union[date, datetime],
        account_id: str,
        kind: Union[TransactionType, str],
        amount: Numeric
    ) -> Transaction:
        """
        Validate and apply a deposit or withdrawal

        Args:
            transaction_date: Effective date of the posting
            account_id: Account identifier, created on first deposit
            kind: TransactionType or its code ("D" / "W")
            amount: Positive amount with at most 2 fractional digits

        Returns:
            The created Transaction

        Raises:
            InvalidAmountError, InvalidKindError,
            FirstTransactionMustBeDepositError, InsufficientBalanceError
        """
        transaction_date = as_date(transaction_date)
        value = validate_amount(amount)
        transaction_type = TransactionType.from_value(kind)
        if not account_id or not account_id.strip():
            raise LedgerError("Account id must be a non-empty string")

        account = self.ledger.get_account(account_id)
        if account is None and transaction_type == TransactionType.WITHDRAWAL:
            raise FirstTransactionMustBeDepositError(
                "First transaction for an account cannot be a withdrawal."
            )

        sequence = self._daily_sequence.get(transaction_date, 0) + 1
        key = (transaction_date, sequence)

        if account is None:
            balance_before = ZERO
            later = []
        else:
            index = account.insertion_index(key)
            balance_before = account.balance_before_index(index)
            later = account.transactions_from_index(index)

        if transaction_type == TransactionType.WITHDRAWAL:
            # A back-dated withdrawal also lowers every later balance
            available = min([balance_before] + [txn.balance for txn in later])
            if value > available:
                raise InsufficientBalanceError("Insufficient balance for withdrawal.")
            resulting_balance = balance_before - value
        else:
            resulting_balance = balance_before + value

        # All checks passed, mutate
        account = self.ledger.open_account(account_id)
        self._daily_sequence[transaction_date] = sequence

        transaction = Transaction(
            transaction_date=transaction_date,
            account_id=account_id,
            transaction_type=transaction_type,
            amount=value,
            balance=resulting_balance,
            transaction_id=self._format_id(transaction_date, sequence),
            sequence=sequence
        )
        account.post(transaction)
        return transaction
