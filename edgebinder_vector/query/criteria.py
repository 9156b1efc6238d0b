"""Immutable query criteria records.

``QueryCriteria`` is the builder's state. It is a frozen dataclass, so the
builder derives new criteria with ``dataclasses.replace`` and an instance can
be shared freely between threads.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


OPERATOR_EQUALS = "="
OPERATOR_IN = "IN"
OPERATOR_BETWEEN = "BETWEEN"
OPERATOR_EXISTS = "EXISTS"
OPERATOR_IS_NULL = "IS_NULL"


@dataclass(frozen=True)
class WhereCondition:
    """A single ``field operator value`` predicate."""
    field: str
    operator: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass(frozen=True)
class OrderBy:
    """Single-key sort order."""
    field: str
    direction: str = "asc"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "direction": self.direction}


@dataclass(frozen=True)
class QueryCriteria:
    """Accumulated, not yet executed query criteria.

    Where conditions are combined conjunctively and kept in call order.
    """
    from_entity_id: Optional[str] = None
    from_entity_type: Optional[str] = None
    to_entity_id: Optional[str] = None
    to_entity_type: Optional[str] = None
    binding_type: Optional[str] = None
    where_conditions: Tuple[WhereCondition, ...] = field(default_factory=tuple)
    limit: Optional[int] = None
    offset: Optional[int] = None
    order_by: Optional[OrderBy] = None

    def is_empty(self) -> bool:
        """Whether no filter, sort or paging option is set."""
        return self == QueryCriteria()

    def to_dict(self) -> Dict[str, Any]:
        """Render the criteria as plain Python structures."""
        return {
            "from_entity_id": self.from_entity_id,
            "from_entity_type": self.from_entity_type,
            "to_entity_id": self.to_entity_id,
            "to_entity_type": self.to_entity_type,
            "binding_type": self.binding_type,
            "where_conditions": [condition.to_dict() for condition in self.where_conditions],
            "limit": self.limit,
            "offset": self.offset,
            "order_by": self.order_by.to_dict() if self.order_by else None,
        }
