"""Base binding store interface.

Defines the persistence contract the binding framework depends on,
independent of the backing implementation (OpenSearch today).

Stores are synchronous: the query builder invokes ``execute_query`` directly
from ``get()``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models import Binding
from ..query.base import QueryBuilder
from ..query.result import QueryResult


class BindingStore(ABC):
    """Abstract base class for binding stores.

    Implementations should ensure idempotent writes keyed by binding id and
    return bindings with metadata restored to Python types.
    """

    @abstractmethod
    def store(self, binding: Binding) -> None:
        """Store (or overwrite) a binding."""
        pass

    @abstractmethod
    def store_many(self, bindings: Iterable[Binding]) -> int:
        """Store multiple bindings in batch.

        Returns the number of bindings successfully stored.
        """
        pass

    @abstractmethod
    def find(self, binding_id: str) -> Optional[Binding]:
        """Find a binding by id.

        Returns
        - ``Binding`` when found, else ``None``
        """
        pass

    @abstractmethod
    def delete(self, binding_id: str) -> None:
        pass

    @abstractmethod
    def update_metadata(self, binding_id: str, metadata: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def find_by_entity(self, entity_type: str, entity_id: str) -> List[Binding]:
        """Find all bindings where the entity is either endpoint."""
        pass

    @abstractmethod
    def find_between_entities(
        self,
        from_type: str,
        from_id: str,
        to_type: str,
        to_id: str,
        binding_type: Optional[str] = None
    ) -> List[Binding]:
        pass

    @abstractmethod
    def query(self) -> QueryBuilder:
        """Create a query builder wired to this store."""
        pass

    @abstractmethod
    def execute_query(self, query: QueryBuilder) -> QueryResult:
        pass

    @abstractmethod
    def count(self, query: QueryBuilder) -> int:
        pass

    @abstractmethod
    def delete_by_entity(self, entity_type: str, entity_id: str) -> int:
        """Delete all bindings involving an entity.

        Returns the number of bindings deleted.
        """
        pass

    @abstractmethod
    def extract_entity_id(self, entity: Any) -> str:
        pass

    @abstractmethod
    def extract_entity_type(self, entity: Any) -> str:
        pass

    @abstractmethod
    def validate_and_normalize_metadata(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the backing store is reachable."""
        pass


class BindingStoreError(Exception):
    """Base exception for binding store operations.

    Carries the failed ``operation`` and whether retrying may help
    (connection issues and server errors are retryable, client errors not).
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        retryable: bool = False,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"{operation}: {reason}")
        self.operation = operation
        self.reason = reason
        self.retryable = retryable
        self.error_code = error_code
        self.details = details

    def is_retryable(self) -> bool:
        return self.retryable

    @classmethod
    def connection_error(cls, operation: str, message: str) -> "BindingStoreError":
        return cls(operation, f"Connection error: {message}", retryable=True)

    @classmethod
    def client_error(
        cls,
        operation: str,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "BindingStoreError":
        return cls(
            operation,
            f"Client error: {message}",
            retryable=False,
            error_code=error_code,
            details=details,
        )

    @classmethod
    def server_error(
        cls,
        operation: str,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "BindingStoreError":
        return cls(
            operation,
            f"Server error: {message}",
            retryable=True,
            error_code=error_code,
            details=details,
        )


class SchemaError(BindingStoreError):
    """Collection (index) creation or mapping problem. Never retryable."""

    def __init__(
        self,
        operation: str,
        reason: str,
        collection_name: Optional[str] = None,
        schema_definition: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(operation, reason, retryable=False)
        self.collection_name = collection_name
        self.schema_definition = schema_definition

    @classmethod
    def collection_creation_failed(
        cls,
        collection_name: str,
        reason: str,
        schema_definition: Optional[Dict[str, Any]] = None,
    ) -> "SchemaError":
        return cls(
            "schema_creation",
            f"Failed to create collection '{collection_name}': {reason}",
            collection_name=collection_name,
            schema_definition=schema_definition,
        )

    @classmethod
    def property_conflict(cls, collection_name: str, property_name: str, conflict: str) -> "SchemaError":
        return cls(
            "schema_property",
            f"Property '{property_name}' in collection '{collection_name}' has a conflict: {conflict}",
            collection_name=collection_name,
        )

    @classmethod
    def vectorizer_configuration_error(cls, collection_name: str, vectorizer: str, error: str) -> "SchemaError":
        return cls(
            "schema_vectorizer",
            f"Vectorizer '{vectorizer}' configuration error for collection '{collection_name}': {error}",
            collection_name=collection_name,
        )


class EntityExtractionError(ValueError):
    """The store could not derive an id or type from an entity object."""

    def __init__(self, message: str, entity: Any = None):
        super().__init__(message)
        self.entity = entity


class InvalidMetadataError(ValueError):
    """Binding metadata has an unsupported type or exceeds the size limit."""
    pass


class AdapterError(Exception):
    """Binding store adapter could not be created from configuration."""

    def __init__(self, adapter_type: str, message: str):
        super().__init__(f"[{adapter_type}] {message}")
        self.adapter_type = adapter_type

    @classmethod
    def creation_failed(cls, adapter_type: str, reason: str) -> "AdapterError":
        return cls(adapter_type, f"Adapter creation failed: {reason}")

    @classmethod
    def missing_configuration(cls, adapter_type: str, missing: Sequence[str]) -> "AdapterError":
        return cls(adapter_type, f"Missing required configuration: {', '.join(missing)}")

    @classmethod
    def invalid_configuration(cls, adapter_type: str, reason: str) -> "AdapterError":
        return cls(adapter_type, f"Invalid configuration: {reason}")
