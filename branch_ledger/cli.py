"""
Console Shell Module

Menu-driven console front end for the ledger: input transactions, define
interest rules and print monthly statements. Parses text input into
primitive values, calls the Bank context and renders tables.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, TextIO, Tuple
import sys

from .bank import Bank
from .config import get_config
from .currency import format_amount, to_decimal
from .errors import LedgerError
from .interest import InterestRule
from .logging_config import get_logger, setup_logging
from .statements import AccountStatement, MonthlyStatement, StatementLine


class InputFormatError(LedgerError):
    """Console input line could not be parsed"""
    code = "input_format"


MAIN_MENU = (
    "[T] Input transactions\n"
    "[I] Define interest rules\n"
    "[P] Print statement\n"
    "[Q] Quit"
)

STATEMENT_HEADER = (
    "| Date     | Txn Id      | Type | Amount   | Balance    |\n"
    "|----------|-------------|------|----------|------------|"
)

RULES_HEADER = (
    "| Date     | RuleId | Rate (%) |\n"
    "|----------|--------|----------|"
)


# Parsing

def parse_date(token: str) -> date:
    try:
        return datetime.strptime(token, "%Y%m%d").date()
    except ValueError:
        raise InputFormatError("Date must be in YYYYMMdd format.")


def parse_decimal(token: str, what: str) -> Decimal:
    try:
        return to_decimal(token)
    except ValueError:
        raise InputFormatError(f"{what} must be a valid number.")


def parse_transaction_line(line: str) -> Tuple[date, str, str, Decimal]:
    """<Date> <Account> <Type> <Amount>"""
    parts = line.split()
    if len(parts) != 4:
        raise InputFormatError("Invalid input format. Expected: <Date> <Account> <Type> <Amount>")
    transaction_date = parse_date(parts[0])
    return transaction_date, parts[1], parts[2].upper(), parse_decimal(parts[3], "Amount")


def parse_rule_line(line: str) -> Tuple[date, str, Decimal]:
    """<Date> <RuleId> <Rate in %>"""
    parts = line.split()
    if len(parts) != 3:
        raise InputFormatError("Invalid input format. Expected: <Date> <RuleId> <Rate>")
    return parse_date(parts[0]), parts[1], parse_decimal(parts[2], "Rate")


def parse_statement_line(line: str) -> Tuple[str, int, int]:
    """<Account> <Year><Month>"""
    parts = line.split()
    if len(parts) != 2:
        raise InputFormatError("Invalid input format. Expected: <Account> <YearMonth>")
    year_month = parts[1]
    if len(year_month) != 6 or not year_month.isdigit():
        raise InputFormatError("Month must be in YYYYMM format (e.g., 202306)")
    return parts[0], int(year_month[:4]), int(year_month[4:])


# Rendering

def _statement_row(line: StatementLine) -> str:
    return (
        f"| {line.line_date:%Y%m%d} | {line.transaction_id:<11} | {line.line_type:<4} "
        f"| {format_amount(line.amount):>8} | {format_amount(line.balance):>10} |"
    )


def render_account_statement(statement: AccountStatement) -> str:
    rows = [f"Account: {statement.account_id}", STATEMENT_HEADER]
    rows.extend(_statement_row(line) for line in statement.lines)
    rows.append("")
    rows.append(f"Interest earned: {format_amount(statement.interest)}")
    rows.append(f"Final balance: {format_amount(statement.final_balance)}")
    return "\n".join(rows)


def render_monthly_statement(statement: MonthlyStatement) -> str:
    rows = [f"Account: {statement.account_id}", STATEMENT_HEADER]
    rows.extend(_statement_row(line) for line in statement.lines)
    return "\n".join(rows)


def render_rules(rules: List[InterestRule]) -> str:
    rows = ["Interest rules:", RULES_HEADER]
    for rule in rules:
        rows.append(f"| {rule.effective_date:%Y%m%d} | {rule.rule_id:<6} | {rule.rate:>8.2f} |")
    return "\n".join(rows)


class LedgerShell:
    """
    Interactive menu loop over a Bank
    """

    def __init__(self, bank: Bank, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self.bank = bank
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.logger = get_logger("branch_ledger.cli")

    def write(self, text: str = "", end: str = "\n") -> None:
        self.stdout.write(text + end)
        self.stdout.flush()

    def read_line(self) -> Optional[str]:
        """Next input line without its newline, None at end of input"""
        line = self.stdin.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    def run(self) -> None:
        self.write("Welcome to the branch ledger! What would you like to do?")

        while True:
            self.write()
            self.write(MAIN_MENU)
            self.write("> ", end="")
            choice = self.read_line()
            if choice is None:
                return

            choice = choice.strip().upper()
            if choice == "T":
                self._prompt_loop(
                    "Please enter transaction details in <Date> <Account> <Type> <Amount> format\n"
                    "Example: 20230626 AC001 W 100.00",
                    self.handle_transaction
                )
            elif choice == "I":
                self._prompt_loop(
                    "Please enter interest rules details in <Date> <RuleId> <Rate in %> format\n"
                    "Example: 20230615 RULE03 2.20",
                    self.handle_rule
                )
            elif choice == "P":
                self._prompt_loop(
                    "Please enter account and month to generate the statement <Account> <Year><Month>\n"
                    "Example: AC001 202306",
                    self.handle_statement
                )
            elif choice == "Q":
                self.write()
                self.write("Thank you for banking with us.")
                self.write("Have a nice day!")
                return
            else:
                self.write("Invalid option. Please try again.")

    def _prompt_loop(self, prompt: str, handler) -> None:
        self.write()
        self.write(prompt)
        self.write("(or enter blank to go back to main menu):")

        while True:
            line = self.read_line()
            if line is None or not line.strip():
                return
            try:
                handler(line)
            except LedgerError as e:
                self.logger.debug("Rejected input %r: %s", line, e)
                self.write(f"Error: {e}")
                self.write("Please try again or press enter to go back.")

    def handle_transaction(self, line: str) -> None:
        transaction_date, account_id, kind, amount = parse_transaction_line(line)
        self.bank.apply(transaction_date, account_id, kind, amount)
        self.write()
        self.write(render_account_statement(self.bank.account_statement(account_id)))

    def handle_rule(self, line: str) -> None:
        effective_date, rule_id, rate = parse_rule_line(line)
        self.bank.set_rule(effective_date, rule_id, rate)
        self.write()
        self.write(render_rules(self.bank.list_rules()))

    def handle_statement(self, line: str) -> None:
        account_id, year, month = parse_statement_line(line)
        statement = self.bank.monthly_statement(account_id, year, month)
        self.write()
        self.write(render_monthly_statement(statement))


def main() -> None:
    """Console entry point"""
    config = get_config()
    # Keep the console clean unless logs go to a file
    setup_logging(
        level=config.log_level if config.log_file else "WARNING",
        log_format=config.log_format,
        log_file=config.log_file
    )

    try:
        LedgerShell(Bank(config)).run()
    except KeyboardInterrupt:
        print("\nGoodbye.")


if __name__ == "__main__":
    main()
