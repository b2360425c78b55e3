"""
Record command-line interface.

Defines the `records` command group, one command per record operation:

    crmops records create-account NAME [--industry ...]
    crmops records update-account NAME FIELD VALUE
    crmops records upsert-opportunities NAME... [--account-id ...] [--dry-run] [--verbose]
    crmops records insert-then-delete --table T --input rows.json
"""

from pathlib import Path
from typing import List, Optional

import typer

from crmops.cli.common import CLI_ERRORS, build_client, fail, load_rows_file
from crmops.logging_utils import echo_summary
from crmops.record_operations import (
    create_account,
    insert_then_delete,
    update_account_field,
    upsert_opportunities,
)

records_app = typer.Typer(help="Create, update, upsert, and delete CRM records.")


# ---------------------------------------------------------------------------
# Command: records create-account
# ---------------------------------------------------------------------------
@records_app.command("create-account")
def create_account_command(
    name: str = typer.Argument(..., help="Account name."),
    industry: Optional[str] = typer.Option(None, "--industry", help="Account industry."),
    phone: Optional[str] = typer.Option(None, "--phone", help="Account phone number."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to Supabase."),
) -> None:
    """Insert a single account."""
    fields = {k: v for k, v in (("industry", industry), ("phone", phone)) if v is not None}

    try:
        row = create_account(build_client(dry_run), name, **fields)
    except CLI_ERRORS as e:
        fail(e)

    typer.echo(f"Created account {row.get('name')!r} with id {row.get('id')}")


# ---------------------------------------------------------------------------
# Command: records update-account
# ---------------------------------------------------------------------------
@records_app.command("update-account")
def update_account_command(
    name: str = typer.Argument(..., help="Name of the account to update."),
    field: str = typer.Argument(..., help="Column to set."),
    value: str = typer.Argument(..., help="New value."),
) -> None:
    """Look up an account by name and set one of its fields."""
    try:
        rows = update_account_field(build_client(False), name, field, value)
    except CLI_ERRORS as e:
        fail(e)

    typer.echo(f"Updated {len(rows)} account(s) named {name!r}: {field} = {value!r}")


# ---------------------------------------------------------------------------
# Command: records upsert-opportunities
# ---------------------------------------------------------------------------
@records_app.command("upsert-opportunities")
def upsert_opportunities_command(
    names: List[str] = typer.Argument(..., help="Opportunity names."),
    account_id: Optional[str] = typer.Option(
        None, "--account-id", help="Account to attach new opportunities to."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to Supabase."),
    verbose: bool = typer.Option(False, "--verbose", help="Show high-level progress logs."),
) -> None:
    """
    Ensure one opportunity exists per name, creating missing ones with
    default stage, close date, and amount.
    """
    try:
        binding = upsert_opportunities(
            build_client(dry_run), names, account_id=account_id, verbose=verbose
        )
    except CLI_ERRORS as e:
        fail(e)

    echo_summary("Opportunity Upsert Summary", binding)


# ---------------------------------------------------------------------------
# Command: records insert-then-delete
# ---------------------------------------------------------------------------
@records_app.command("insert-then-delete")
def insert_then_delete_command(
    table: str = typer.Option(..., "--table", help="Target table."),
    input_path: Path = typer.Option(
        ...,
        "--input",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="JSON file holding a list of rows.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to Supabase."),
) -> None:
    """Bulk-insert rows into a table, then delete the rows just inserted."""
    try:
        rows = load_rows_file(input_path)
        summary = insert_then_delete(build_client(dry_run), table, rows)
    except CLI_ERRORS as e:
        fail(e)

    echo_summary("Insert/Delete Summary", summary)
