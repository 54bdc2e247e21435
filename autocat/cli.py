"""CLI for the ``autocat`` package.

Callable command handlers (``cmd_*``) hold the logic and return a process exit
code; the Typer application below is a thin layer over them. The root callback
loads a local ``.env`` with ``python-dotenv`` and configures logging once
before any command runs. Errors go to stderr with a non-zero exit.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .accounts import get_account_suggestion
from .locations import detect_transaction_location, extract_base_location
from .logging_setup import configure_logging
from .merchants import extract_merchant_name
from .models import Direction, InvalidInputError, Transaction
from .trips import detect_trips
from .vendors import extract_vendor_name, validate_vendor_name

_REQUIRED_COLUMNS = ("id", "description", "amount", "date")


def _err(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)


def _parse_direction(raw: str | None) -> Direction:
    value = (raw or "").strip().lower()
    if value in {"income", "credit"}:
        return "income"
    if value in {"expense", "debit"}:
        return "expense"
    raise InvalidInputError(f"unknown transaction direction: {raw!r}")


def read_transactions_csv(path: Path) -> list[Transaction]:
    """Read a minimal transaction CSV.

    Columns: ``id``, ``description``, ``amount``, ``date`` and one of
    ``direction``/``type`` (``income``/``expense``, ``credit``/``debit``).
    Raises :class:`InvalidInputError` for missing columns or unusable rows.
    """

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        headers = reader.fieldnames
        if headers is None:
            raise InvalidInputError(f"CSV appears to have no header row: {path}")
        missing = [c for c in _REQUIRED_COLUMNS if c not in headers]
        if missing:
            raise InvalidInputError("CSV is missing columns: " + ", ".join(missing))
        direction_col = "direction" if "direction" in headers else "type"
        if direction_col not in headers:
            raise InvalidInputError("CSV needs a 'direction' or 'type' column")

        out: list[Transaction] = []
        for line_no, row in enumerate(reader, start=2):
            try:
                amount = float(row["amount"])
            except (TypeError, ValueError) as e:
                raise InvalidInputError(
                    f"line {line_no}: amount is not a number: {row['amount']!r}"
                ) from e
            out.append(
                Transaction(
                    id=(row["id"] or "").strip(),
                    description=row["description"] or "",
                    amount=amount,
                    date=(row["date"] or "").strip(),
                    direction=_parse_direction(row[direction_col]),
                )
            )
    return out


# ---- Command handlers ---------------------------------------------------------


def cmd_vendor(description: str) -> int:
    """Print the cleaned vendor name for one bank description."""

    try:
        value = validate_vendor_name(description)
    except InvalidInputError as e:
        _err(str(e))
        return 1
    typer.echo(extract_vendor_name(value))
    return 0


def cmd_merchant(description: str) -> int:
    """Print ``<clean name>\\t<category>\\t<vat tag>`` for one bank description.

    Category and VAT tag are empty when no known merchant matches.
    """

    try:
        value = validate_vendor_name(description)
    except InvalidInputError as e:
        _err(str(e))
        return 1
    match = extract_merchant_name(extract_vendor_name(value) or value)
    merchant = match.matched_merchant
    category = merchant.category if merchant else ""
    vat = merchant.vat_rate_tag if merchant else ""
    typer.echo(f"{match.clean_name}\t{category}\t{vat}")
    return 0


def cmd_location(description: str) -> int:
    """Print the town detected in a description; exit 1 when there is none."""

    location = detect_transaction_location(description)
    if location is None:
        _err(f"no known location in {description!r}")
        return 1
    typer.echo(location)
    return 0


def cmd_suggest_account(category: str, direction: str, vat_rate_tag: str | None) -> int:
    try:
        parsed = _parse_direction(direction)
    except InvalidInputError as e:
        _err(str(e))
        return 1
    suggestion = get_account_suggestion(category, parsed, vat_rate_tag)
    if suggestion is None:
        _err(f"no account suggestion for category {category!r} ({parsed})")
        return 1
    typer.echo(json.dumps(asdict(suggestion), ensure_ascii=False))
    return 0


def cmd_detect_trips(
    csv_path: Path, base_address: str | None, fallback_address: str | None
) -> int:
    """Detect trips in a transaction CSV and print them as a JSON array."""

    try:
        transactions = read_transactions_csv(csv_path)
    except FileNotFoundError:
        _err(f"File not found: {csv_path}")
        return 1
    except PermissionError:
        _err(f"Permission denied: {csv_path}")
        return 1
    except (InvalidInputError, csv.Error, UnicodeDecodeError) as e:
        _err(f"Failed to parse CSV: {e}")
        return 1

    base = extract_base_location(base_address, fallback_address)
    trips = detect_trips(transactions, base)
    typer.echo(json.dumps([asdict(t) for t in trips], ensure_ascii=False, indent=2))
    return 0


def cmd_recategorise(
    mode: str,
    *,
    database_url: str | None,
    base_address: str | None,
    fallback_address: str | None,
    batch_size: int | None,
) -> int:
    """Recategorise ledger transactions in the database with the rules classifier."""

    # Deferred imports keep SQLAlchemy off the path of the lookup commands
    from .classify import rules_classifier
    from .db.client import session_scope
    from .persistence import (
        SqlTransactionStore,
        load_accounts,
        load_invoices,
        load_transactions,
    )
    from .recategorise import MODES, recategorise

    if mode not in MODES:
        _err(f"unknown mode {mode!r}; expected one of: {', '.join(MODES)}")
        return 1

    try:
        with session_scope(database_url=database_url) as session:
            transactions = load_transactions(session)
            accounts = load_accounts(session)
            invoices = load_invoices(session)
    except Exception as e:
        _err(f"failed to load ledger: {e}")
        return 1

    try:
        result = recategorise(
            transactions,
            classifier=rules_classifier,
            accounts=accounts,
            store=SqlTransactionStore(database_url=database_url),
            mode=mode,  # type: ignore[arg-type]
            base_location=extract_base_location(base_address, fallback_address),
            invoices=invoices,
            batch_size=batch_size,
        )
    except ValueError as e:
        _err(str(e))
        return 1

    summary = asdict(result)
    summary.pop("trips", None)
    typer.echo(json.dumps(summary))
    return 0


# ---- Typer-based console interface --------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Classify Irish bank transactions, map them to accounts and detect business trips. "
        "Loads DATABASE_URL and AUTOCAT_* settings from a local .env."
    ),
)

# Module-level option object to satisfy ruff B008 (no calls in parameter defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="CSV with id, description, amount, date and direction/type columns",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)


@app.command("vendor")
def vendor_cmd(description: Annotated[str, typer.Argument(help="Raw bank description")]) -> None:
    """Print the cleaned vendor name."""

    if code := cmd_vendor(description):
        raise typer.Exit(code)


@app.command("merchant")
def merchant_cmd(
    description: Annotated[str, typer.Argument(help="Raw bank description")],
) -> None:
    """Match a description against the known-merchant table."""

    if code := cmd_merchant(description):
        raise typer.Exit(code)


@app.command("location")
def location_cmd(
    description: Annotated[str, typer.Argument(help="Raw bank description")],
) -> None:
    """Print the Irish town a description refers to."""

    if code := cmd_location(description):
        raise typer.Exit(code)


@app.command("suggest-account")
def suggest_account_cmd(
    category: Annotated[str, typer.Option("--category", help="Classification category")],
    direction: Annotated[str, typer.Option("--direction", help="income or expense")] = "expense",
    vat_rate_tag: Annotated[
        str | None, typer.Option("--vat-rate-tag", help="VAT label or machine tag")
    ] = None,
) -> None:
    """Suggest a Chart-of-Accounts entry for a category."""

    if code := cmd_suggest_account(category, direction, vat_rate_tag):
        raise typer.Exit(code)


@app.command("detect-trips")
def detect_trips_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    base_address: str | None = typer.Option(
        None, "--base-address", help="Business address used to find the home town."
    ),
    fallback_address: str | None = typer.Option(
        None, "--fallback-address", help="Consulted when the base address has no known town."
    ),
) -> None:
    """Detect business trips in a transaction CSV and print them as JSON."""

    if code := cmd_detect_trips(csv_path, base_address, fallback_address):
        raise typer.Exit(code)


@app.command("recategorise")
def recategorise_cmd(
    *,
    mode: str = typer.Option(
        "uncategorised", "--mode", help="uncategorised, miscellaneous or all."
    ),
    database_url: str | None = typer.Option(
        None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
    ),
    base_address: str | None = typer.Option(
        None, "--base-address", help="Business address used for trip detection."
    ),
    fallback_address: str | None = typer.Option(
        None, "--fallback-address", help="Consulted when the base address has no known town."
    ),
    batch_size: int | None = typer.Option(
        None, "--batch-size", help="Override AUTOCAT_BATCH_SIZE (default 20)."
    ),
) -> None:
    """Recategorise ledger transactions and print the result counts as JSON."""

    code = cmd_recategorise(
        mode,
        database_url=database_url,
        base_address=base_address,
        fallback_address=fallback_address,
        batch_size=batch_size,
    )
    if code:
        raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
