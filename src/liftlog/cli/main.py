"""
CLI entry point using Typer.

Provides commands for the training log:
- log-workout / list-workouts / show-workout / next-workout
- validate-workout / unvalidate-workout / delete-workout / export
- add-exercise / list-exercises
- add-program / list-programs / show-program / delete-program / import-programs
- e1rm / top-sets / volume / frequency
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from . import views
from .app import app

# Importing the command modules registers their commands on ``app``.
from .commands import exercises, programs, progress, workouts  # noqa: F401


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Strength training log: workouts, programs and progress analytics.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=views.console, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
