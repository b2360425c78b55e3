"""
logging_utils.py

Logging helpers shared by the CLI and the link orchestrator.

Output goes through Typer's echo so progress lines and command output
share one stream and behave the same under CliRunner in tests.
"""

import typer


def log_verbose(message: str, verbose: bool) -> None:
    """
    Print a high-level progress message when verbose mode is enabled.

    Parameters
    ----------
    message : str
        Short, plain-English description of the current step
        (e.g., "Looking up 3 accounts...").
    verbose : bool
        When False, this function does nothing.
    """
    if verbose:
        typer.echo(message)


def echo_summary(title: str, summary: dict) -> None:
    """
    Print a summary block, one ``key: value`` line per field.
    """
    typer.echo(f"\n=== {title} ===")
    for key, value in summary.items():
        typer.echo(f"{key}: {value}")
