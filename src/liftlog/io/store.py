"""
JSONL-based document storage for workouts, programs and exercises.

Handles reading, writing, and managing the data directory.
"""

import logging
import uuid
from datetime import date as date_type
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from ..core.errors import AlreadyExistsError, NotFoundError, ValidationError
from ..core.exercises import ExerciseEntry, allowed_units_for_category, exercise_id_from_name
from ..core.models import Program, Workout, WorkoutInput
from .serializers import (
    decode_document,
    dict_to_exercise_entry,
    encode_document,
    exercise_entry_to_dict,
    normalize_workout_date,
    program_to_dict,
    serialize_workout_for_create,
    serialize_workout_for_update,
    set_workout_validated,
    validate_program_shape,
    validate_workout_shape,
)

logger = logging.getLogger(__name__)

WORKOUTS_FILE = "workouts.jsonl"
PROGRAMS_FILE = "programs.jsonl"
EXERCISES_FILE = "exercises.jsonl"

_PROGRAM_META_KEYS = ("id", "createdAt", "updatedAt", "isCustom")


def new_document_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """
    Manages liftlog data stored in JSONL format.

    The data directory contains one file per collection, each holding one
    JSON document per line:
    - workouts.jsonl
    - programs.jsonl
    - exercises.jsonl

    Every write rewrites the whole collection file. The store assumes a
    single process; concurrent writers are last-write-wins.
    """

    def __init__(self, data_dir: str | Path, now: Callable[[], datetime] | None = None):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the collection files
            now: Clock used for createdAt/updatedAt (defaults to datetime.now)
        """
        self.data_dir = Path(data_dir)
        self.workouts_path = self.data_dir / WORKOUTS_FILE
        self.programs_path = self.data_dir / PROGRAMS_FILE
        self.exercises_path = self.data_dir / EXERCISES_FILE
        self._now = now or datetime.now

    def exists(self) -> bool:
        """Check if the data directory exists."""
        return self.data_dir.is_dir()

    def init(self) -> None:
        """
        Create the data directory and empty collection files if missing.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.workouts_path, self.programs_path, self.exercises_path):
            if not path.exists():
                path.touch()

    # =========================================================================
    # RAW DOCUMENT ACCESS
    # =========================================================================

    def _read_documents(self, path: Path) -> list[dict[str, Any]]:
        """
        Read every decodable document of a collection.

        A missing file is an empty collection. Lines that are not JSON
        objects are logged and skipped.
        """
        if not path.exists():
            return []

        documents: list[dict[str, Any]] = []
        with open(path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    documents.append(decode_document(line))
                except ValidationError as e:
                    logger.warning("Skipping line %d in %s: %s", line_num, path, e)
        return documents

    def _write_documents(self, path: Path, documents: Iterable[Mapping[str, Any]]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            for document in documents:
                f.write(encode_document(document) + "\n")
        logger.debug("Wrote %s", path)

    @staticmethod
    def _index_of(documents: list[dict[str, Any]], doc_id: str) -> int | None:
        for i, document in enumerate(documents):
            if document.get("id") == doc_id:
                return i
        return None

    # =========================================================================
    # WORKOUTS
    # =========================================================================

    def create_workout(self, workout_input: WorkoutInput | Mapping[str, Any]) -> Workout:
        """
        Store a new workout.

        Returns:
            The stored Workout (validated=False)

        Raises:
            ValidationError: workout.invalidInput
        """
        document = serialize_workout_for_create(workout_input, now=self._now())
        document["id"] = new_document_id()
        documents = self._read_documents(self.workouts_path)
        documents.append(document)
        self._write_documents(self.workouts_path, documents)
        logger.info("Created workout %s", document["id"])
        return validate_workout_shape(document)

    def update_workout(self, workout_id: str, workout_input: WorkoutInput | Mapping[str, Any]) -> Workout:
        """
        Replace a workout's date, notes and exercises.

        createdAt and validated are kept from the stored record.

        Raises:
            NotFoundError: workout.notFound
            ValidationError: workout.invalidInput
        """
        documents = self._read_documents(self.workouts_path)
        idx = self._index_of(documents, workout_id)
        existing = documents[idx] if idx is not None else None
        document = serialize_workout_for_update(existing, workout_input, now=self._now())
        document["id"] = workout_id
        documents[idx] = document  # type: ignore[index]
        self._write_documents(self.workouts_path, documents)
        return validate_workout_shape(document)

    def _set_validated(self, workout_id: str, validated: bool) -> Workout:
        documents = self._read_documents(self.workouts_path)
        idx = self._index_of(documents, workout_id)
        existing = documents[idx] if idx is not None else None
        changes = set_workout_validated(existing, validated, now=self._now())
        documents[idx] = {**documents[idx], **changes}  # type: ignore[index]
        self._write_documents(self.workouts_path, documents)
        return validate_workout_shape(documents[idx])  # type: ignore[index]

    def validate_workout(self, workout_id: str) -> Workout:
        """Mark a workout as performed."""
        return self._set_validated(workout_id, True)

    def unvalidate_workout(self, workout_id: str) -> Workout:
        """Mark a workout as planned again."""
        return self._set_validated(workout_id, False)

    def delete_workout(self, workout_id: str) -> None:
        """
        Raises:
            NotFoundError: workout.notFound
        """
        documents = self._read_documents(self.workouts_path)
        idx = self._index_of(documents, workout_id)
        if idx is None:
            raise NotFoundError("workout.notFound", workout_id)
        del documents[idx]
        self._write_documents(self.workouts_path, documents)
        logger.info("Deleted workout %s", workout_id)

    def get_workout(self, workout_id: str) -> Workout | None:
        """
        Fetch one workout.

        Returns:
            Workout, or None if no document has this id

        Raises:
            ValidationError: workout.invalidData if the stored document is corrupt
        """
        documents = self._read_documents(self.workouts_path)
        idx = self._index_of(documents, workout_id)
        if idx is None:
            return None
        return validate_workout_shape(documents[idx])

    def get_workouts(self) -> list[Workout]:
        """
        Load every workout, newest first.

        Documents failing validation are logged and skipped.
        """
        workouts: list[Workout] = []
        for document in self._read_documents(self.workouts_path):
            try:
                workouts.append(validate_workout_shape(document))
            except ValidationError as e:
                logger.warning("Skipping invalid workout %s: %s", document.get("id"), e)
        workouts.sort(key=lambda w: w.date, reverse=True)
        return workouts

    def get_latest_validated_workout(self) -> Workout | None:
        for workout in self.get_workouts():
            if workout.validated:
                return workout
        return None

    def _today(self, today: date_type | None) -> date_type:
        return today if today is not None else self._now().date()

    def get_earliest_non_validated_future_workout(self, today: date_type | None = None) -> Workout | None:
        """
        Find the next planned workout.

        Args:
            today: Reference day (defaults to the store clock)

        Returns:
            The earliest non-validated workout dated today or later, or None
        """
        day = self._today(today)
        upcoming = [
            w for w in self.get_workouts()
            if not w.validated and normalize_workout_date(w.date).date() >= day
        ]
        if not upcoming:
            return None
        return min(upcoming, key=lambda w: w.date)

    def get_todays_workout(self, today: date_type | None = None) -> Workout | None:
        """
        Find a workout dated today.

        A non-validated (planned) workout is preferred over a validated one.
        """
        day = self._today(today)
        todays = [w for w in self.get_workouts() if normalize_workout_date(w.date).date() == day]
        if not todays:
            return None
        for workout in todays:
            if not workout.validated:
                return workout
        return todays[0]

    # =========================================================================
    # PROGRAMS
    # =========================================================================

    @staticmethod
    def _program_payload(program: Program | Mapping[str, Any]) -> dict[str, Any]:
        """Validate an inbound program and strip its metadata keys."""
        raw = program_to_dict(program) if not isinstance(program, Mapping) else dict(program)
        validated = validate_program_shape(raw, stored=False)
        payload = program_to_dict(validated)
        for key in _PROGRAM_META_KEYS:
            payload.pop(key, None)
        return payload

    def create_program(self, program: Program | Mapping[str, Any]) -> Program:
        """
        Store a user-authored program.

        Returns:
            The stored Program with id, timestamps and isCustom=True

        Raises:
            ValidationError: program.invalidInput
        """
        document = self._program_payload(program)
        now = self._now()
        document.update(id=new_document_id(), createdAt=now, updatedAt=now, isCustom=True)
        documents = self._read_documents(self.programs_path)
        documents.append(document)
        self._write_documents(self.programs_path, documents)
        logger.info("Created program %s (%s)", document["id"], document["name"])
        return validate_program_shape(document)

    def get_programs(self) -> list[Program]:
        """
        Load every program, most recently created first.

        Documents failing validation are logged and skipped.
        """
        programs: list[Program] = []
        for document in self._read_documents(self.programs_path):
            try:
                programs.append(validate_program_shape(document))
            except ValidationError as e:
                logger.warning("Skipping invalid program %s: %s", document.get("id"), e)
        programs.sort(key=lambda p: p.created_at or datetime.min, reverse=True)
        return programs

    def get_program(self, program_id: str) -> Program | None:
        """
        Fetch one program.

        Returns:
            Program, or None if no document has this id

        Raises:
            ValidationError: program.missingWeek / missingAlternatingWeeks /
                missingPhases / invalidData for a corrupt document
        """
        documents = self._read_documents(self.programs_path)
        idx = self._index_of(documents, program_id)
        if idx is None:
            return None
        return validate_program_shape(documents[idx])

    def update_program(self, program_id: str, program: Program | Mapping[str, Any]) -> Program:
        """
        Replace a program's content.

        The variant payload is replaced wholesale, so switching type drops
        the old variant's key. createdAt and isCustom are kept.

        Raises:
            NotFoundError: program.notFound
            ValidationError: program.invalidInput
        """
        documents = self._read_documents(self.programs_path)
        idx = self._index_of(documents, program_id)
        if idx is None:
            raise NotFoundError("program.notFound", program_id)
        existing = documents[idx]
        document = self._program_payload(program)
        document.update(
            id=program_id,
            createdAt=existing.get("createdAt") or self._now(),
            updatedAt=self._now(),
            isCustom=existing.get("isCustom", True),
        )
        documents[idx] = document
        self._write_documents(self.programs_path, documents)
        return validate_program_shape(document)

    def delete_program(self, program_id: str) -> None:
        """
        Raises:
            NotFoundError: program.notFound
        """
        documents = self._read_documents(self.programs_path)
        idx = self._index_of(documents, program_id)
        if idx is None:
            raise NotFoundError("program.notFound", program_id)
        del documents[idx]
        self._write_documents(self.programs_path, documents)
        logger.info("Deleted program %s", program_id)

    def import_library_programs(self, library: Iterable[Mapping[str, Any]]) -> int:
        """
        Copy library programs the user does not have yet.

        Library documents are matched by id. Invalid library documents are
        logged and skipped. Copies are stored with isCustom=False.

        Args:
            library: Program documents (with "id" keys)

        Returns:
            Number of programs copied
        """
        documents = self._read_documents(self.programs_path)
        existing_ids = {d.get("id") for d in documents}
        copied = 0

        for entry in library:
            program_id = entry.get("id") or new_document_id()
            if program_id in existing_ids:
                continue
            try:
                document = self._program_payload(entry)
            except ValidationError as e:
                logger.warning("Skipping invalid library program %s: %s", program_id, e)
                continue
            now = self._now()
            document.update(id=program_id, createdAt=now, updatedAt=now, isCustom=False)
            documents.append(document)
            existing_ids.add(program_id)
            copied += 1

        if copied:
            self._write_documents(self.programs_path, documents)
        logger.info("Imported %d library program(s)", copied)
        return copied

    # =========================================================================
    # EXERCISES
    # =========================================================================

    def create_exercise(
        self,
        name: str,
        category: str = "",
        body_part: str = "",
        description: str | None = None,
    ) -> ExerciseEntry:
        """
        Add a user exercise to the catalog.

        The id is derived from the name ("Bench Press" -> "bench-press").

        Raises:
            ValidationError: exercise.invalidInput if the name is blank
            AlreadyExistsError: exercise.alreadyExists
        """
        if not name or not name.strip():
            raise ValidationError("exercise.invalidInput", "name must not be empty")
        exercise_id = exercise_id_from_name(name)
        documents = self._read_documents(self.exercises_path)
        if self._index_of(documents, exercise_id) is not None:
            raise AlreadyExistsError("exercise.alreadyExists", exercise_id)

        entry = ExerciseEntry(
            id=exercise_id,
            name=name.strip(),
            allowed_units=allowed_units_for_category(category),
            category=category.strip(),
            body_part=body_part.strip(),
            description=description.strip() if description else None,
            source="user",
        )
        documents.append(exercise_entry_to_dict(entry))
        self._write_documents(self.exercises_path, documents)
        logger.info("Created exercise %s", exercise_id)
        return entry

    def get_exercise(self, exercise_id: str) -> ExerciseEntry:
        """
        Raises:
            NotFoundError: exercise.notFound
            ValidationError: exercise.invalidData
        """
        documents = self._read_documents(self.exercises_path)
        idx = self._index_of(documents, exercise_id)
        if idx is None:
            raise NotFoundError("exercise.notFound", exercise_id)
        return dict_to_exercise_entry(documents[idx])

    def get_exercises(self) -> list[ExerciseEntry]:
        """Load the catalog sorted by name; corrupt documents are skipped."""
        entries: list[ExerciseEntry] = []
        for document in self._read_documents(self.exercises_path):
            try:
                entries.append(dict_to_exercise_entry(document))
            except ValidationError as e:
                logger.warning("Skipping invalid exercise %s: %s", document.get("id"), e)
        entries.sort(key=lambda e: e.name.lower())
        return entries

    def update_exercise(self, exercise_id: str, **changes: Any) -> ExerciseEntry:
        """
        Update name, category, body_part or description of an exercise.

        The id and source never change.

        Raises:
            NotFoundError: exercise.notFound
            ValidationError: exercise.invalidInput for an unknown field
        """
        allowed = {"name": "name", "category": "category", "body_part": "bodyPart", "description": "description"}
        unknown = set(changes) - set(allowed)
        if unknown:
            raise ValidationError("exercise.invalidInput", f"unknown fields: {sorted(unknown)}")

        documents = self._read_documents(self.exercises_path)
        idx = self._index_of(documents, exercise_id)
        if idx is None:
            raise NotFoundError("exercise.notFound", exercise_id)

        document = dict(documents[idx])
        for field_name, value in changes.items():
            document[allowed[field_name]] = value.strip() if isinstance(value, str) else value
        if "category" in changes:
            document["allowedUnits"] = allowed_units_for_category(document.get("category") or "")
        entry = dict_to_exercise_entry(document, "exercise.invalidInput")
        documents[idx] = exercise_entry_to_dict(entry)
        self._write_documents(self.exercises_path, documents)
        return entry

