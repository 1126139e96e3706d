"""Result wrapper returned by every SDK operation.

A ``Result`` carries either a value or an ``ErrorObject``, never both. Build
one with ``ok()`` or ``err()``; there are no implicit conversions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from .config import RESULT_SUCCESS

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class ErrorObject:
    """Error code and message, as found in the ``error`` field of an envelope."""

    code: int
    message: str

    SERVER_ERROR: ClassVar[ErrorObject]
    FAILURE: ClassVar[ErrorObject]
    AUTHENTICATION_ERROR: ClassVar[ErrorObject]
    NETWORK_ERROR: ClassVar[ErrorObject]
    UNAUTHORIZED: ClassVar[ErrorObject]

    def __str__(self) -> str:
        return f"Error {self.code}: {self.message}"

    def __int__(self) -> int:
        return self.code

    @classmethod
    def generic(cls, message: str) -> ErrorObject:
        """Catch-all error for unexpected exceptions."""
        return cls(-1, message)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorObject:
        return cls(code=int(data.get("code", -1)), message=str(data.get("message") or ""))


ErrorObject.SERVER_ERROR = ErrorObject(-31001, "Server error. Something went wrong :(")
ErrorObject.FAILURE = ErrorObject(-31002, "Failure. Not successful")
ErrorObject.AUTHENTICATION_ERROR = ErrorObject(-31003, "Server authentication error")
ErrorObject.NETWORK_ERROR = ErrorObject(-31004, "Network error")
ErrorObject.UNAUTHORIZED = ErrorObject(-31005, "Unauthorized call to API")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an API call or SDK method.

    Attributes:
        result: The payload, ``None`` if the call failed.
        error: The error, ``None`` if the call succeeded.
        id: Request id echoed by the server, if any.
    """

    result: Optional[T] = None
    error: Optional[ErrorObject] = None
    id: int = 0

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("Result must carry exactly one of result or error")

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_success(self) -> bool:
        """True when the payload is the ``"Success"`` sentinel (case-insensitive)."""
        return isinstance(self.result, str) and self.result.lower() == RESULT_SUCCESS.lower()

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Apply ``fn`` to the payload; errors pass through unchanged."""
        if self.error is not None:
            return err(self.error, id=self.id)
        return ok(fn(self.result), id=self.id)

    @classmethod
    def from_envelope(
        cls,
        data: Any,
        parse: Callable[[Any], T] | None = None,
    ) -> Result[T]:
        """Build a Result from a decoded ``{result, error, id}`` envelope.

        A server error is passed through verbatim. An envelope carrying
        neither a result nor an error, or one that is not a dict, yields
        ``ErrorObject.SERVER_ERROR``.
        """
        if not isinstance(data, dict):
            return err(ErrorObject.SERVER_ERROR)

        request_id = data.get("id") or 0
        error = data.get("error")
        if error is not None:
            if not isinstance(error, dict):
                return err(ErrorObject.SERVER_ERROR, id=request_id)
            return err(ErrorObject.from_dict(error), id=request_id)

        payload = data.get("result")
        if payload is None:
            return err(ErrorObject.SERVER_ERROR, id=request_id)
        return ok(parse(payload) if parse else payload, id=request_id)


def ok(value: T, id: int = 0) -> Result[T]:
    """Wrap a successful value."""
    return Result(result=value, id=id)


def err(error: ErrorObject, id: int = 0) -> Result[Any]:
    """Wrap an error."""
    return Result(error=error, id=id)
