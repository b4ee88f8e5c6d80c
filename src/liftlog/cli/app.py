"""Shared Typer app object, shared option types, and store utility."""

from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config_loader import Settings, load_settings
from ..core.errors import ValidationError
from ..io.serializers import parse_datetime
from ..io.store import DocumentStore

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Directory holding the liftlog JSONL files"),
]

# Shared --json flag
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftlog",
    help="Strength training log: workouts, programs and progress analytics.",
    no_args_is_help=True,
)


def get_settings() -> Settings:
    """Load user settings (defaults merged with ~/.liftlog/config.yaml)."""
    return load_settings()


def get_store(data_dir: Path | None) -> DocumentStore:
    """Get the document store from an explicit directory or the configured one."""
    if data_dir is None:
        data_dir = get_settings().data_dir
    return DocumentStore(data_dir)


def parse_day_option(value: str | None, option: str) -> date | None:
    """
    Parse a YYYY-MM-DD option value.

    Raises:
        typer.BadParameter: If the value is not an ISO date
    """
    if value is None:
        return None
    try:
        return parse_datetime(value, "cli.invalidDate", option).date()
    except ValidationError as e:
        raise typer.BadParameter(f"{option} must be YYYY-MM-DD, got {value!r}") from e


def today() -> date:
    return datetime.now().date()
