"""Query result container."""

from typing import Any, Iterable, Iterator, Optional, Tuple


class QueryResult:
    """Immutable, ordered collection of bindings returned by a query.

    Iterating is restartable; every ``iter()`` walks the stored bindings
    from the start.
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Iterable[Any] = ()):
        object.__setattr__(self, "_bindings", tuple(bindings))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("QueryResult is immutable")

    def get_bindings(self) -> Tuple[Any, ...]:
        return self._bindings

    def is_empty(self) -> bool:
        return not self._bindings

    def first(self) -> Optional[Any]:
        return self._bindings[0] if self._bindings else None

    def count(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __getitem__(self, index):
        return self._bindings[index]

    def __bool__(self) -> bool:
        return bool(self._bindings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryResult):
            return NotImplemented
        return self._bindings == other._bindings

    __hash__ = None

    def __repr__(self) -> str:
        return f"QueryResult(count={len(self._bindings)})"
