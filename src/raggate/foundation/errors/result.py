"""Result type for operations whose failure is part of the contract.

Registry validation and backend calls both have failures that callers must
handle rather than catch, so they return ``Result`` instead of raising:

    >>> registry.register(profile).match(ok=lambda c: c.status, err=str)
    'CONNECTED'
    >>> (await invoker.query_result("q")).unwrap_or_else(lambda f: f.sentinel)
    'AgenticRag服务调用失败'
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar, cast

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


class Result(Generic[T, E]):
    """Either a success value (``Ok``) or a failure value (``Err``)."""

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        """Success value. Raises RuntimeError on a failure."""
        if not self._is_ok:
            raise RuntimeError(f"called unwrap() on Err({self._value!r})")
        return cast(T, self._value)

    def unwrap_err(self) -> E:
        """Failure value. Raises RuntimeError on a success."""
        if self._is_ok:
            raise RuntimeError(f"called unwrap_err() on Ok({self._value!r})")
        return cast(E, self._value)

    def unwrap_or_else(self, fallback: Callable[[E], T]) -> T:
        return cast(T, self._value) if self._is_ok else fallback(cast(E, self._value))

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value; a failure passes through untouched."""
        if self._is_ok:
            return Ok(f(cast(T, self._value)))
        return cast("Result[U, E]", self)

    def match(self, *, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        """Fold both variants into one value."""
        if self._is_ok:
            return ok(cast(T, self._value))
        return err(cast(E, self._value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (self._is_ok, self._value) == (other._is_ok, other._value)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    return Result(value, True)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    return Result(error, False)
