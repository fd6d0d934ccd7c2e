"""
Error types for the ee-do client.

Every error raised by the library extends EEError and carries a numeric
code, so callers can catch the whole family with one except clause or
dispatch on the code.

Error Code Ranges:
- 1xxx: Usage errors (wrong arguments to the library itself)
- 2xxx: Algorithm lookup and call construction errors
- 3xxx: Transport errors
- 4xxx: Initialization errors
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


# ============================================================================
# Error Codes
# ============================================================================


class ErrorCode(IntEnum):
    """Numeric error codes used by all ee-do errors."""

    # Library misuse
    USAGE_ERROR = 1001

    # Algorithm lookup and argument handling
    UNKNOWN_ALGORITHM = 2001
    ARGUMENT_ERROR = 2002

    # HTTP layer
    TRANSPORT_ERROR = 3001

    # Bootstrap
    NOT_INITIALIZED = 4001
    LOAD_FAILURE = 4002
    HOOK_FAILURE = 4003


ERROR_CODE_NAMES: dict[ErrorCode, str] = {code: code.name for code in ErrorCode}


# ============================================================================
# Base Error Class
# ============================================================================


class EEError(Exception):
    """
    Base error class for all ee-do errors.

    Error Hierarchy:
    - EEError (base)
      - UsageError: the library was called incorrectly
      - UnknownAlgorithmError: an algorithm or factory member does not exist
      - ArgumentError: arguments do not match an algorithm signature
      - NotInitializedError: the catalog has not been loaded yet
      - TransportError: an HTTP request failed
      - LoadFailure: the algorithm catalog could not be fetched or parsed
      - HookFailure: a proxy type or generator hook failed during bootstrap

    Example:
        ```python
        try:
            ee_do.initialize()
        except EEError as error:
            print(f"ee-do error [{error.code}]: {error.message}")
        ```

    Attributes:
        message: Human-readable error message.
        code: Numeric error code.
        code_name: String name of the error code.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        code_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.code_name = code_name or ERROR_CODE_NAMES.get(code, "UNKNOWN_ERROR")

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"

    def to_dict(self) -> dict[str, Any]:
        """Return a dictionary representation of the error."""
        return {
            "name": self.__class__.__name__,
            "message": self.message,
            "code": int(self.code),
            "code_name": self.code_name,
        }


# ============================================================================
# Specific Error Types
# ============================================================================


class UsageError(EEError):
    """
    Error raised when the library itself is called incorrectly.

    Error Code: 1001 (USAGE_ERROR)

    Common causes:
    - Passing an error callback to initialize() without a success callback
    - Asynchronous initialize() outside a running event loop
    - Constructing a generated class after reset() removed it
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.USAGE_ERROR)


class UnknownAlgorithmError(EEError):
    """
    Error raised when an algorithm name cannot be resolved.

    Error Code: 2001 (UNKNOWN_ALGORITHM)

    Attributes:
        name: The algorithm (or Type.member) name that was looked up.
    """

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"Unknown algorithm: {name}", ErrorCode.UNKNOWN_ALGORITHM)
        self.name = name


class ArgumentError(EEError):
    """
    Error raised when call arguments do not match an algorithm signature.

    Error Code: 2002 (ARGUMENT_ERROR)

    Attributes:
        algorithm: Name of the algorithm being called.
    """

    def __init__(self, message: str, algorithm: str | None = None) -> None:
        super().__init__(message, ErrorCode.ARGUMENT_ERROR)
        self.algorithm = algorithm


class NotInitializedError(EEError):
    """
    Error raised when the algorithm catalog is used before it was loaded.

    Error Code: 4001 (NOT_INITIALIZED)
    """

    def __init__(self, message: str = "ee_do.initialize() has not been called") -> None:
        super().__init__(message, ErrorCode.NOT_INITIALIZED)


class TransportError(EEError):
    """
    Error raised when a request to the API endpoint fails.

    Error Code: 3001 (TRANSPORT_ERROR)

    Attributes:
        status: HTTP status code, when a response was received.
        url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.TRANSPORT_ERROR)
        self.status = status
        self.url = url


class LoadFailure(EEError):
    """
    Error raised when the algorithm catalog cannot be fetched or parsed.

    Error Code: 4002 (LOAD_FAILURE)
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.LOAD_FAILURE)


class HookFailure(EEError):
    """
    Error raised when a bootstrap hook fails after the catalog was loaded.

    Error Code: 4003 (HOOK_FAILURE)

    Attributes:
        hook: Name of the hook that raised (e.g. "Image.initialize").
    """

    def __init__(self, message: str, hook: str | None = None) -> None:
        super().__init__(message, ErrorCode.HOOK_FAILURE)
        self.hook = hook
