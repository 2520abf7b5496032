"""Result pattern used by the lookup chain.

Each external lookup step produces a Result instead of raising, so a failing
source becomes a typed "no result" and the chain keeps its control flow.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar

T = TypeVar('T')  # Success type
E = TypeVar('E', bound=Exception)  # Error type


class Result(ABC, Generic[T, E]):
    """Either a successful value or the exception that prevented it."""

    @abstractmethod
    def is_success(self) -> bool:
        ...

    @abstractmethod
    def is_failure(self) -> bool:
        ...

    @abstractmethod
    def value(self) -> T:
        """Get the success value.

        Raises:
            ValueError: If the result is a failure.
        """
        ...

    @abstractmethod
    def error(self) -> E:
        """Get the error.

        Raises:
            ValueError: If the result is a success.
        """
        ...


@dataclass(frozen=True, slots=True)
class Success(Result[T, E]):
    """A step that produced a value (which may itself be empty)."""
    _value: T

    def __repr__(self) -> str:
        return f"Success({self._value!r})"

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def value(self) -> T:
        return self._value

    def error(self) -> E:
        raise ValueError("Cannot get error from Success result")


@dataclass(frozen=True, slots=True)
class Failure(Result[T, E]):
    """A step that failed with an exception."""
    _error: E

    def __repr__(self) -> str:
        return f"Failure({self._error!r})"

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def value(self) -> T:
        raise ValueError(f"Cannot get value from Failure result: {self._error}")

    def error(self) -> E:
        return self._error


async def capture(awaitable: Awaitable[T]) -> Result[T, Exception]:
    """Await a coroutine and fold any exception it raises into a Failure.

    Cancellation is not an ``Exception`` and still propagates.
    """
    try:
        return Success(await awaitable)
    except Exception as e:
        return Failure(e)
