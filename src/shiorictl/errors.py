"""Exceptions raised by the shiorictl client."""

from typing import Iterable


class ShioriError(Exception):
    """Base exception class for shiorictl errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MissingConfiguration(ShioriError):
    """Server URL, username or password is not configured."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing configuration: {', '.join(self.missing)}")


class UnknownOperation(ShioriError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown API operation: {name!r}")


class MissingRequiredArgument(ShioriError):
    """A template placeholder of the operation was left unresolved."""

    def __init__(self, operation: str, missing: Iterable[str]):
        self.operation = operation
        self.missing = sorted(missing)
        super().__init__(
            f"Operation {operation!r} is missing required arguments: {', '.join(self.missing)}"
        )


class AuthenticationFailed(ShioriError):
    """Raised when the server rejects the credentials or the token."""


class NetworkFailure(ShioriError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class NetworkTimeout(NetworkFailure):
    pass


class MalformedResponse(ShioriError):
    """Response body could not be parsed or lacks an expected field."""
