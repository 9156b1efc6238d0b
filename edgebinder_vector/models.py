"""Domain objects exchanged with the binding store.

- ``Entity``: marker interface for anything identified by a ``(type, id)``
  pair. Objects that merely expose ``get_id()``/``get_type()`` are accepted
  too; see ``edgebinder_vector.query.entities``.
- ``Binding``: a typed, directed relationship between two entities with
  attached metadata. This is the record every query returns.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class Entity(ABC):
    """Interface for domain entities that can take part in a binding."""

    @abstractmethod
    def get_id(self) -> str:
        """Return the entity identifier."""
        pass

    @abstractmethod
    def get_type(self) -> str:
        """Return the entity type name."""
        pass


class SimpleEntity(Entity):
    """Minimal ``Entity`` implementation holding an id and a type."""

    def __init__(self, id: str, type: str):
        self.id = id
        self.type = type

    def get_id(self) -> str:
        return self.id

    def get_type(self) -> str:
        return self.type

    def __repr__(self) -> str:
        return f"SimpleEntity(id={self.id!r}, type={self.type!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SimpleEntity):
            return NotImplemented
        return (self.id, self.type) == (other.id, other.type)

    def __hash__(self) -> int:
        return hash((self.id, self.type))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Binding:
    """A relationship record between two entities.

    Instances are immutable; use ``with_metadata`` to derive an updated copy.
    """
    id: str
    from_type: str
    from_id: str
    to_type: str
    to_id: str
    type: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        from_entity: Any,
        to_entity: Any,
        type: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "Binding":
        """Create a new binding with a generated id and current timestamps.

        ``from_entity``/``to_entity`` may be ``Entity`` instances or any
        object exposing ``get_id()``/``get_type()``.
        """
        # Imported here; the query package depends on this module.
        from .query.entities import extract_entity_id, extract_entity_type

        now = _utcnow()
        return cls(
            id=str(uuid.uuid4()),
            from_type=extract_entity_type(from_entity),
            from_id=extract_entity_id(from_entity),
            to_type=extract_entity_type(to_entity),
            to_id=extract_entity_id(to_entity),
            type=type,
            metadata=dict(metadata or {}),
            created_at=now,
            updated_at=now,
        )

    def with_metadata(self, metadata: Dict[str, Any]) -> "Binding":
        """Return a copy carrying ``metadata`` and a refreshed ``updated_at``."""
        return replace(self, metadata=dict(metadata), updated_at=_utcnow())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_type": self.from_type,
            "from_id": self.from_id,
            "to_type": self.to_type,
            "to_id": self.to_id,
            "type": self.type,
            "metadata": dict(self.metadata),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
