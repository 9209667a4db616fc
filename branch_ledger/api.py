"""
FastAPI REST API Module

Provides REST endpoints for transactions, interest rules, balances, interest
accrual and statements over one Bank context. Endpoints are async and never
await while inside the ledger, so requests are applied one at a time on the
event loop.
"""

from datetime import date, datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
import uvicorn

from .bank import Bank
from .config import get_config
from .errors import AccountNotFoundError, LedgerError
from .logging_config import setup_logging
from .schemas import (
    AccountStatementModel, AccrualModel, DailyBalanceModel, InterestRuleModel,
    InterestRuleRequest, MonthlyStatementModel, TransactionModel, TransactionRequest
)
from . import __version__


router = APIRouter()


# Dependency to get the bank bound to this app
def get_bank(request: Request) -> Bank:
    return request.app.state.bank


def to_http_error(error: LedgerError) -> HTTPException:
    """Map ledger errors onto HTTP status codes"""
    if isinstance(error, AccountNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "branch_ledger",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Transactions

@router.post("/transactions", status_code=status.HTTP_201_CREATED, response_model=TransactionModel)
async def create_transaction(request: TransactionRequest, bank: Bank = Depends(get_bank)):
    """Apply a deposit or withdrawal"""
    try:
        transaction = bank.apply(request.date, request.account_id, request.type, request.amount)
    except LedgerError as e:
        raise to_http_error(e)
    return TransactionModel.from_transaction(transaction)


@router.get("/accounts")
async def list_accounts(bank: Bank = Depends(get_bank)):
    """List registered account ids"""
    return {"accounts": bank.account_ids()}


@router.get("/accounts/{account_id}/transactions")
async def get_account_transactions(account_id: str, bank: Bank = Depends(get_bank)):
    """Transaction history in date order"""
    try:
        transactions = bank.get_transactions(account_id)
    except LedgerError as e:
        raise to_http_error(e)

    return {
        "account_id": account_id,
        "transactions": [TransactionModel.from_transaction(txn) for txn in transactions]
    }


@router.get("/accounts/{account_id}/balance")
async def get_account_balance(account_id: str, bank: Bank = Depends(get_bank)):
    """Current balance"""
    try:
        balance = bank.get_balance(account_id)
    except LedgerError as e:
        raise to_http_error(e)
    return {"account_id": account_id, "balance": f"{balance:.2f}"}


@router.get("/accounts/{account_id}/daily-balances")
async def get_daily_balances(account_id: str, start: date, end: date, bank: Bank = Depends(get_bank)):
    """End-of-day balance for every day in [start, end]"""
    try:
        balances = bank.daily_balances(account_id, start, end)
    except LedgerError as e:
        raise to_http_error(e)

    return {
        "account_id": account_id,
        "balances": [DailyBalanceModel(date=day, balance=f"{value:.2f}") for day, value in balances.items()]
    }


@router.get("/accounts/{account_id}/interest", response_model=AccrualModel)
async def get_accrued_interest(account_id: str, start: date, end: date, bank: Bank = Depends(get_bank)):
    """Interest accrued over [start, end] with its accrual periods"""
    try:
        result = bank.accrue(account_id, start, end)
    except LedgerError as e:
        raise to_http_error(e)
    return AccrualModel.from_result(account_id, result)


# Statements

@router.get("/accounts/{account_id}/statements/{year}/{month}", response_model=MonthlyStatementModel)
async def get_monthly_statement(account_id: str, year: int, month: int, bank: Bank = Depends(get_bank)):
    """Monthly statement with its interest line"""
    try:
        statement = bank.monthly_statement(account_id, year, month)
    except LedgerError as e:
        raise to_http_error(e)
    return MonthlyStatementModel.from_statement(statement)


@router.get("/accounts/{account_id}/statement", response_model=AccountStatementModel)
async def get_account_statement(account_id: str, as_of: Optional[date] = None, bank: Bank = Depends(get_bank)):
    """Full statement with interest accrued up to as_of (default today)"""
    try:
        statement = bank.account_statement(account_id, as_of)
    except LedgerError as e:
        raise to_http_error(e)
    return AccountStatementModel.from_statement(statement)


# Interest rules

@router.post("/interest-rules", status_code=status.HTTP_201_CREATED, response_model=InterestRuleModel)
async def create_interest_rule(request: InterestRuleRequest, bank: Bank = Depends(get_bank)):
    """Add or replace the rule effective on a date"""
    try:
        rule = bank.set_rule(request.date, request.rule_id, request.rate)
    except LedgerError as e:
        raise to_http_error(e)
    return InterestRuleModel.from_rule(rule)


@router.get("/interest-rules")
async def list_interest_rules(bank: Bank = Depends(get_bank)):
    """All rules by effective date"""
    return {"rules": [InterestRuleModel.from_rule(rule) for rule in bank.list_rules()]}


def create_app(bank: Optional[Bank] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Branch Ledger API",
        description="Single-branch ledger with time-weighted interest accrual",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.bank = bank or Bank()
    app.include_router(router)
    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the API server"""
    config = get_config()
    setup_logging(
        level="DEBUG" if debug else config.log_level,
        log_format=config.log_format,
        log_file=config.log_file
    )
    uvicorn.run(
        create_app(Bank(config)),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level="debug" if debug else "info"
    )
