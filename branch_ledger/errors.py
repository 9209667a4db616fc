"""
Ledger Error Taxonomy

Every failure the ledger engine signals to its caller. All errors derive from
ValueError so callers that only care about "bad input" can catch that.
"""


class LedgerError(ValueError):
    """Base class for all ledger errors"""
    code = "ledger_error"


class InvalidAmountError(LedgerError):
    """Amount is not positive or has more than 2 fractional digits"""
    code = "invalid_amount"


class InvalidKindError(LedgerError):
    """Transaction kind is neither deposit nor withdrawal"""
    code = "invalid_kind"


class FirstTransactionMustBeDepositError(LedgerError):
    """A new account cannot be opened with a withdrawal"""
    code = "first_transaction_must_be_deposit"


class InsufficientBalanceError(LedgerError):
    """Withdrawal would take the balance below zero"""
    code = "insufficient_balance"


class InvalidRateError(LedgerError):
    """Interest rate is outside (0, 100)"""
    code = "invalid_rate"


class AccountNotFoundError(LedgerError):
    """Account id is not registered"""
    code = "account_not_found"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class InvalidMonthError(LedgerError):
    """Month is outside 1-12"""
    code = "invalid_month"


class InvalidDateRangeError(LedgerError):
    """Range end is before range start"""
    code = "invalid_date_range"
