"""Exercise catalog commands: add-exercise, list-exercises."""

import json
from typing import Annotated, Optional

import typer

from ...core.errors import ServiceError
from ...io.serializers import exercise_entry_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Argument(help="Exercise name, e.g. 'Bench Press'")],
    category: Annotated[
        str,
        typer.Option("--category", "-c", help="Category, e.g. Barbell | Dumbbell | Bodyweight"),
    ] = "",
    body_part: Annotated[
        str,
        typer.Option("--body-part", "-b", help="Main body part trained"),
    ] = "",
    description: Annotated[
        Optional[str],
        typer.Option("--description", help="Free-text description"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Add an exercise to the catalog. Its ID is derived from the name.
    """
    store = get_store(data_dir)
    try:
        entry = store.create_exercise(name, category, body_part, description)
    except ServiceError as e:
        views.print_error(f"{e.code}: {name}")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(exercise_entry_to_dict(entry), indent=2))
        return
    views.print_success(f"Added exercise '{entry.name}' (id: {entry.id})")


@app.command("list-exercises")
def list_exercises(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the exercise catalog.
    """
    entries = get_store(data_dir).get_exercises()
    if json_out:
        print(json.dumps([exercise_entry_to_dict(e) for e in entries], indent=2))
        return
    views.print_exercises(entries)
