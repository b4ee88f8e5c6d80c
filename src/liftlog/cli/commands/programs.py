"""Program commands: add-program, list-programs, show-program, delete-program, import-programs."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from ...core.composer import compose_program
from ...core.drafts import draft_from_dict
from ...core.errors import CompositionError, NotFoundError, ServiceError
from ...io.serializers import encode_document, program_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_settings, get_store


def _read_json_file(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        views.print_error(f"Cannot read {path}: {e}")
        raise typer.Exit(1)


@app.command("add-program")
def add_program(
    draft_file: Annotated[
        Path,
        typer.Argument(help="JSON file with the program draft (name, description, type, weeks...)"),
    ],
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compose a program from a draft file and save it.

    Set rows missing reps or RIR are dropped; every exercise must keep at
    least one complete set.
    """
    data = _read_json_file(draft_file)
    if not isinstance(data, dict):
        views.print_error("Draft file must hold a JSON object")
        raise typer.Exit(1)

    settings = get_settings()
    store = get_store(data_dir)
    try:
        program = compose_program(draft_from_dict(data), rir_max=settings.rir_max)
        stored = store.create_program(program)
    except CompositionError as e:
        where = f" ({e.subject})" if e.subject else ""
        views.print_error(f"{e.code}{where}: {e.message}")
        raise typer.Exit(1)
    except ServiceError as e:
        views.print_error(f"{e.code}: {e}")
        raise typer.Exit(1)

    if json_out:
        print(encode_document(program_to_dict(stored)))
        return
    views.print_success(f"Saved program '{stored.name}' (id: {stored.id})")


@app.command("list-programs")
def list_programs(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List programs, most recently created first.
    """
    programs = get_store(data_dir).get_programs()
    if json_out:
        print(json.dumps([json.loads(encode_document(program_to_dict(p))) for p in programs], indent=2))
        return
    views.print_programs(programs)


@app.command("show-program")
def show_program(
    program_id: Annotated[str, typer.Argument(help="Program ID")],
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show a program week by week.
    """
    try:
        program = get_store(data_dir).get_program(program_id)
    except ServiceError as e:
        views.print_error(f"{e.code}: {program_id}")
        raise typer.Exit(1)
    if program is None:
        views.print_error(f"Program not found: {program_id}")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(json.loads(encode_document(program_to_dict(program))), indent=2))
        return
    views.print_program(program)


@app.command("delete-program")
def delete_program(
    program_id: Annotated[str, typer.Argument(help="Program ID")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a program by ID.
    """
    store = get_store(data_dir)
    if not force and not views.confirm_action(f"Delete program {program_id}?"):
        views.print_info("Cancelled.")
        return
    try:
        store.delete_program(program_id)
    except NotFoundError as e:
        views.print_error(f"{e.code}: {program_id}")
        raise typer.Exit(1)
    views.print_success(f"Deleted program {program_id}")


@app.command("import-programs")
def import_programs(
    library_file: Annotated[
        Path,
        typer.Argument(help="JSON file holding a list of library program documents"),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """
    Copy library programs you do not have yet (matched by ID).
    """
    documents = _read_json_file(library_file)
    if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
        views.print_error("Library file must hold a JSON list of program objects")
        raise typer.Exit(1)

    copied = get_store(data_dir).import_library_programs(documents)
    views.print_success(f"Imported {copied} program(s)")
