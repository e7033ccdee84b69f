"""Error types for the recognition field."""


class RecognitionFieldError(RuntimeError):
    """Base class for recoverable recognition field errors."""


class ValidationError(RecognitionFieldError):
    """Raised when a link references a node id outside the working set."""

    def __init__(self, message: str, node_id: int | None = None) -> None:
        super().__init__(message)
        self.node_id = node_id


class StorageError(RecognitionFieldError):
    """Raised when the graph store cannot be read or written."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class InputError(RecognitionFieldError):
    """Raised when a new moment is rejected before reaching the store."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors
