"""Base query builder interface.

Defines the contract the binding framework uses to describe a relationship
query, independent of the store that eventually executes it.

Operations that need a richer query backend than the current one are part of
the interface but fail with ``CapabilityNotAvailableError``. Callers can
branch on ``error.capability`` instead of matching message strings.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence


class Capability(Enum):
    """Backend capabilities that are not available yet."""
    OR_CONDITIONS = "or_conditions"
    FIRST_RESULT = "first_result"
    RESULT_COUNT = "result_count"
    EXISTENCE_CHECK = "existence_check"
    SEMANTIC_SEARCH = "semantic_search"
    VECTOR_SEARCH = "vector_search"


class QueryBuilder(ABC):
    """Abstract base class for immutable relationship query builders.

    Every filter, sort and paging method returns a new builder and leaves the
    receiver untouched, so a partially built query can be shared and
    extended independently by several callers.
    """

    @abstractmethod
    def from_(self, entity: Any, entity_id: Optional[str] = None) -> "QueryBuilder":
        """Filter bindings by source entity."""
        pass

    @abstractmethod
    def to(self, entity: Any, entity_id: Optional[str] = None) -> "QueryBuilder":
        """Filter bindings by target entity."""
        pass

    @abstractmethod
    def type(self, binding_type: str) -> "QueryBuilder":
        """Filter bindings by binding type."""
        pass

    @abstractmethod
    def where(self, field: str, operator: Any, value: Any = ...) -> "QueryBuilder":
        """Add a metadata condition."""
        pass

    @abstractmethod
    def where_in(self, field: str, values: Iterable[Any]) -> "QueryBuilder":
        pass

    @abstractmethod
    def where_between(self, field: str, min_value: Any, max_value: Any) -> "QueryBuilder":
        pass

    @abstractmethod
    def where_exists(self, field: str) -> "QueryBuilder":
        pass

    @abstractmethod
    def where_null(self, field: str) -> "QueryBuilder":
        pass

    @abstractmethod
    def or_where(self, callback: Callable[["QueryBuilder"], "QueryBuilder"]) -> "QueryBuilder":
        """Add an OR condition group."""
        pass

    @abstractmethod
    def order_by(self, field: str, direction: str = "asc") -> "QueryBuilder":
        pass

    @abstractmethod
    def limit(self, limit: int) -> "QueryBuilder":
        pass

    @abstractmethod
    def offset(self, offset: int) -> "QueryBuilder":
        pass

    @abstractmethod
    def get(self) -> Any:
        """Execute the query and return the matching bindings."""
        pass

    @abstractmethod
    def first(self) -> Any:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def exists(self) -> bool:
        pass

    @abstractmethod
    def get_criteria(self) -> Any:
        """Return the accumulated criteria for the executing store."""
        pass

    @abstractmethod
    def reset(self) -> "QueryBuilder":
        pass

    @abstractmethod
    def near_text(self, concepts: Sequence[str], certainty: float = 0.7) -> "QueryBuilder":
        pass

    @abstractmethod
    def near_vector(self, vector: Sequence[float], certainty: float = 0.7) -> "QueryBuilder":
        pass


class QueryError(Exception):
    """Base exception for query building and execution."""
    pass


class InvalidQueryArgumentError(QueryError, ValueError):
    """A query method was called with a malformed argument."""
    pass


class OperationNotConfiguredError(QueryError, RuntimeError):
    """A terminal operation was called before an execute callback was set."""
    pass


class CapabilityNotAvailableError(QueryError, NotImplementedError):
    """The operation needs a backend capability that is not available yet."""

    def __init__(self, capability: Capability, operation: str, message: Optional[str] = None):
        self.capability = capability
        self.operation = operation
        super().__init__(
            message
            or f"{operation} requires the '{capability.value}' capability, "
            "which the current query backend does not provide"
        )
