"""
Helpers shared by the crmops CLI sub-applications.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, NoReturn

import typer

from crmops.supabase_client import SupabaseClient

# Failures reported as "Error: ..." with exit code 1. ResolutionError is a
# RuntimeError, so InvalidKey / PersistenceMismatch / UnresolvedKey are
# covered along with credential errors and Supabase errors, which
# SupabaseClient raises as RuntimeError.
CLI_ERRORS = (FileNotFoundError, RuntimeError, LookupError, ValueError)


def load_rows_file(path: Path) -> List[Dict[str, Any]]:
    """
    Load a JSON file holding a list of row objects.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is not valid JSON or not a list of objects.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    try:
        rows = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in input file: {path}") from e

    if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
        raise ValueError(f"Input file must contain a JSON list of objects: {path}")

    return rows


def build_client(dry_run: bool) -> SupabaseClient:
    """Create the Supabase client for a command (no credentials needed in dry-run)."""
    return SupabaseClient.from_env(dry_run=dry_run)


def fail(error: Exception) -> NoReturn:
    """Report ``error`` and exit with status 1."""
    typer.echo(f"Error: {error}")
    raise typer.Exit(code=1)
