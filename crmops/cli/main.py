"""
Root entrypoint for the crmops command-line interface.

This module defines the top-level `crmops` command and mounts the
sub-apps from crmops/cli/:

    • crmops/cli/link_cli.py     →  `crmops link ...`
    • crmops/cli/records_cli.py  →  `crmops records ...`

Supabase credentials are read from SUPABASE_URL / SUPABASE_KEY, loaded
from a .env file when present.
"""

from dotenv import load_dotenv
import typer

from .link_cli import link_app
from .records_cli import records_app

# Load environment variables
load_dotenv()

cli = typer.Typer(
    help=(
        "CRM record operations on Supabase.\n\n"
        "  crmops records ...  create, update, upsert, and delete records\n"
        "  crmops link ...     insert contacts/opportunities linked to accounts by name"
    )
)

cli.add_typer(records_app, name="records")
cli.add_typer(link_app, name="link")

# ---------------------------------------------------------------------------
# Entry point for `python -m crmops.cli.main`
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    cli()
