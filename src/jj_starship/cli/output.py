"""Output utilities for CLI commands.

machine_output() is for the prompt line and JSON and goes to stdout. Errors
never reach the terminal: a prompt segment that cannot resolve renders
nothing, and details go to the debug log.
"""

import click


def machine_output(message: str, nl: bool = True) -> None:
    """Write prompt or machine-readable output to stdout."""
    click.echo(message, nl=nl)
