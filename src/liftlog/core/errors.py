"""
Typed errors raised by liftlog.

Every error carries a stable dotted ``code`` (e.g. ``program.invalidInput``)
for programmatic handling; presentation is left to the caller.
"""


class LiftlogError(Exception):
    """Base exception for liftlog errors."""

    pass


class ServiceError(LiftlogError):
    """Raised by validation and storage operations."""

    def __init__(self, code: str, detail: str | None = None):
        super().__init__(f"{code}: {detail}" if detail else code)
        self.code = code
        self.detail = detail


class ValidationError(ServiceError):
    """Raised when a document or payload does not match its shape."""

    pass


class NotFoundError(ServiceError):
    """Raised when an operation targets a record absent from storage."""

    pass


class AlreadyExistsError(ServiceError):
    """Raised when creating a record whose id is already taken."""

    pass


class CompositionError(LiftlogError):
    """
    Raised when editor state cannot be composed into a Program.

    ``subject`` names the offending item (exercise name, phase name, or a
    "week N / DayK" locator) so the UI can point at it.
    """

    def __init__(self, code: str, message: str, subject: str | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.subject = subject


class EditRejected(CompositionError):
    """Raised when an edit to draft state is refused (e.g. removing the last set)."""

    pass
