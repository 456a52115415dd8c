"""
FILE: folioboard/cli/commands/system.py
PURPOSE: System commands (version)
"""

import typer

# Import shared objects from main module
# These will be available after main.py imports this module
from ..main import app, console, get_settings, __version__


@app.command()
def version(
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """Show Folioboard version and database location."""
    if raw:
        typer.echo(__version__)
        return

    console.print(f"Folioboard v{__version__}")
    console.print(f"[dim]Database: {get_settings().db_path}[/dim]")
