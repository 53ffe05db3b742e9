from __future__ import annotations


class DirAuthError(Exception):
    """Base class for errors raised by dirauth itself."""


class ConfigurationError(DirAuthError):
    """Missing or invalid configuration detected at construction time."""


class InvalidUserModelError(ConfigurationError):
    """The user model is missing, unmapped or lacks its identifier column."""

    def __init__(self, message: str = "Invalid auth user model in configuration") -> None:
        super().__init__(message)


class DirectoryNotConnectedError(DirAuthError):
    """A directory operation was attempted before ``connect()``."""


class DirectoryOperationError(DirAuthError):
    """The directory answered a search with an error result code."""

    def __init__(self, message: str, result: dict | None = None) -> None:
        super().__init__(message)
        self.result = dict(result or {})


class MissingRandomSourceError(DirAuthError):
    """No cryptographically strong random source is available for salting."""

    def __init__(self, message: str = "A strong random source is required to generate a salt") -> None:
        super().__init__(message)
