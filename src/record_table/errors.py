"""Exception types raised by record-table.

Network failures inside ``RecordTable`` are logged and reported through the
notifier rather than raised.  The exceptions below cover configuration and
data-boundary problems, which surface to the caller.
"""


class RecordTableError(Exception):
    """Base class for all record-table errors."""

    pass


class ConfigError(RecordTableError):
    """Raised when an entity name is unknown or a backend cannot be configured."""

    pass


class RecordValidationError(RecordTableError):
    """Raised when a record from the data API does not fit the table schema."""

    pass


class RequiredFieldError(RecordTableError):
    """Raised when a required field is blank in a submitted draft."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Required fields missing: {', '.join(missing)}")


class ModelError(RecordTableError):
    """Raised when the data API reports errors for an operation."""

    def __init__(self, model_name: str, errors: list[str]) -> None:
        self.model_name = model_name
        self.errors = errors
        super().__init__(f"{model_name}: {'; '.join(errors)}")


class ProfileNotFoundError(RecordTableError):
    """Raised when no backend profile is configured."""

    pass


class DataAPIError(RecordTableError):
    """Raised by an adapter when the backend rejects a request.

    ``BoundModel`` turns it into the ``errors`` of a ``ModelResult``.
    """

    def __init__(self, table: str, message: str, code: str | None = None) -> None:
        self.table = table
        self.message = message
        self.code = code
        detail = f" ({code})" if code else ""
        super().__init__(f"{table}: {message}{detail}")
