"""
GridIO exceptions.

All exceptions raised by the decoder inherit from GridIOError so callers can
catch the whole family at once.
"""


class GridIOError(Exception):
    """Base exception for all GridIO errors."""

    pass


class ValidationError(GridIOError, ValueError):
    """Raised when a header field is outside its valid domain."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class FormatError(GridIOError):
    """Raised when the file structure cannot be decoded (bad tag, unrepairable layout)."""

    pass


class GridFileError(GridIOError, OSError):
    """Raised when a GridIO file cannot be opened or read."""

    pass


class StateError(GridIOError, RuntimeError):
    """Raised when a reader or stream is used before opening or after closing."""

    pass
