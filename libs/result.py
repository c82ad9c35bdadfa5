"""Result type used by use cases

Use cases never raise to their callers. They return either
``Return.ok(value)`` or ``Return.err(Error(...))`` and the transport layer
decides how to surface the error.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """Machine-readable error code plus human-readable context"""

    code: str
    message: str
    reason: Optional[str] = None


class Result(Generic[T]):
    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Result is an error: {self._error.code}")
        return self._value

    @property
    def error(self) -> Optional[Error]:
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"


class Return:
    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
