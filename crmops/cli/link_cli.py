"""
Link command-line interface.

Defines the `link` command group, which inserts child rows from a JSON file
and links each one to its account by name, creating missing accounts:

    crmops link contacts --input contacts.json [--dry-run] [--verbose]
    crmops link opportunities --input opportunities.json [--dry-run] [--verbose]

The commands stay thin: loading, client construction, and summary output
live here; the linking itself is done by the record operations.
"""

from pathlib import Path

import typer

from crmops.cli.common import CLI_ERRORS, build_client, fail, load_rows_file
from crmops.logging_utils import echo_summary, log_verbose
from crmops.record_operations import create_opportunities_for_accounts, link_contacts_to_accounts

link_app = typer.Typer(
    help=(
        "Insert contacts or opportunities linked to accounts by name.\n\n"
        "Accounts that do not exist yet are created once per distinct name."
    )
)

INPUT_OPTION = typer.Option(
    ...,
    "--input",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    help="JSON file holding a list of rows.",
)
DRY_RUN_OPTION = typer.Option(False, "--dry-run", help="Resolve links without writing to Supabase.")
VERBOSE_OPTION = typer.Option(False, "--verbose", help="Show high-level progress logs.")


@link_app.command("contacts")
def link_contacts(
    input_path: Path = INPUT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Insert contacts, filing each under the account named after its last name.
    """
    try:
        contacts = load_rows_file(input_path)
        log_verbose(f"Loaded {len(contacts)} contacts from {input_path}.", verbose)
        summary = link_contacts_to_accounts(
            build_client(dry_run), contacts, dry_run=dry_run, verbose=verbose
        )
    except CLI_ERRORS as e:
        fail(e)

    echo_summary("Contact Link Summary", dict(summary))


@link_app.command("opportunities")
def link_opportunities(
    input_path: Path = INPUT_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Insert opportunities, each linked to the account named in "account_name".
    """
    try:
        opportunities = load_rows_file(input_path)
        log_verbose(f"Loaded {len(opportunities)} opportunities from {input_path}.", verbose)
        summary = create_opportunities_for_accounts(
            build_client(dry_run), opportunities, dry_run=dry_run, verbose=verbose
        )
    except CLI_ERRORS as e:
        fail(e)

    echo_summary("Opportunity Link Summary", dict(summary))
