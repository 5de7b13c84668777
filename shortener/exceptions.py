"""Exceptions raised by the alias allocation and resolution engine.

Every failure of ``URLStorage.save_url`` / ``URLStorage.resolve_url`` is one
of the classes below, so the HTTP layer can pick a status code from the
exception type alone.

Classes:
    ShortenerError:
        Base class for all application-specific errors.

    InvalidArgumentError:
        Raised for malformed input to the alias generator or the store.

    AliasExistsError:
        Raised when a caller-supplied alias is already taken.

    AliasSpaceExhaustedError:
        Raised when auto-generation hits its attempt bound.

    URLNotFoundError:
        Raised when no record exists for the requested alias.

    StorageUnavailableError:
        Raised when the database fails for reasons other than the unique constraint.

    DeadlineExceededError:
        Raised when the caller's deadline expires during a store call.

Cancellation is not wrapped: ``asyncio.CancelledError`` propagates as is.

Example:
    >>> from shortener.exceptions import AliasExistsError
    >>> raise AliasExistsError("ex1")
    Traceback (most recent call last):
        ...
    shortener.exceptions.AliasExistsError: alias 'ex1' already exists
"""

__all__ = [
    "ShortenerError",
    "InvalidArgumentError",
    "AliasExistsError",
    "AliasSpaceExhaustedError",
    "URLNotFoundError",
    "StorageUnavailableError",
    "DeadlineExceededError",
]


class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = "app:shortener_error"


class InvalidArgumentError(ShortenerError, ValueError):
    """Raised for malformed input, e.g. a non-positive alias length."""

    error_code = "app:invalid_argument"


class AliasExistsError(ShortenerError):
    """Raised when the requested alias is already stored."""

    error_code = "store:alias_exists"

    def __init__(self, alias: str):
        super().__init__(f"alias {alias!r} already exists")
        self.alias = alias


class AliasSpaceExhaustedError(ShortenerError):
    """Raised when every generated candidate collided with a stored alias."""

    error_code = "store:alias_space_exhausted"

    def __init__(self, attempts: int):
        super().__init__(f"no free alias found after {attempts} attempts")
        self.attempts = attempts


class URLNotFoundError(ShortenerError):
    """Raised when no record matches the alias exactly."""

    error_code = "store:not_found"

    def __init__(self, alias: str):
        super().__init__(f"alias {alias!r} not found")
        self.alias = alias


class StorageUnavailableError(ShortenerError):
    """Raised when the database is unreachable or fails.

    e.g. connection loss, disk errors, lock timeouts.
    """

    error_code = "store:storage_unavailable"


class DeadlineExceededError(ShortenerError, TimeoutError):
    """Raised when a store call outlives the deadline passed by the caller."""

    error_code = "store:deadline_exceeded"

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} exceeded its deadline of {timeout}s")
        self.operation = operation
        self.timeout = timeout
