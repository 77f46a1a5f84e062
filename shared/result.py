"""Result type returned by each step of the client-side pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Result(Generic[T, E]):
    """Either the value a step produced or the error that stopped it."""

    value: Optional[T] = None
    error: Optional[E] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        return cls(value=value)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        return cls(error=error)

    @classmethod
    def capture(cls, step: Callable[[], T], *errors: type[Exception]) -> "Result[T, str]":
        """Run ``step`` and convert any of ``errors`` into an error result."""

        try:
            return Result(value=step())
        except errors as exc:  # type: ignore[misc]
            return Result(error=str(exc))

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None

    def map(self, transform: Callable[[T], U]) -> "Result[U, E]":
        if self.error is not None:
            return Result(error=self.error)
        return Result(value=transform(self.value))  # type: ignore[arg-type]

    def unwrap(self) -> T:
        if self.error is not None:
            raise RuntimeError(f"Tried to unwrap error result: {self.error}")
        return self.value  # type: ignore[return-value]


__all__ = ["Result"]
