"""OpenSearch binding store implementation.

Each binding is one document in the collection index, keyed by the binding
id. Queries built with ``query()`` are executed through ``execute_query``,
which renders the criteria with ``CriteriaTransformer``.

Operations that need OR conditions across both endpoints
(``find_by_entity``, ``delete_by_entity``) and server-side counting are not
available yet and raise ``CapabilityNotAvailableError``.
"""

import json
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import structlog
from opensearchpy import OpenSearch, exceptions
from opensearchpy.helpers import bulk

from ..common.logging import log_performance
from ..models import Binding, Entity
from ..query.base import Capability, CapabilityNotAvailableError, QueryBuilder
from ..query.builder import BasicQueryBuilder
from ..query.result import QueryResult
from .base import (
    BindingStore,
    BindingStoreError,
    EntityExtractionError,
    InvalidMetadataError,
    SchemaError,
)
from .mapping import BindingMapper
from .transformer import CriteriaTransformer

logger = structlog.get_logger("vector_store.opensearch")

DEFAULT_CONFIG: Dict[str, Any] = {
    "collection_name": "edge_bindings",
    "schema": {
        "auto_create": True,
        "number_of_shards": 1,
        "number_of_replicas": 0,
    },
    "performance": {
        "batch_size": 100,
        "refresh": False,
    },
    "max_metadata_bytes": 64 * 1024,
}

_SCALAR_TYPES = (str, int, float, bool, type(None))


def build_index_definition(number_of_shards: int = 1, number_of_replicas: int = 0) -> Dict[str, Any]:
    """Index mappings and settings for the binding collection."""
    return {
        "mappings": {
            "dynamic_templates": [
                {
                    "metadata_strings": {
                        "path_match": "metadata.*",
                        "match_mapping_type": "string",
                        "mapping": {"type": "keyword"},
                    }
                }
            ],
            "properties": {
                "binding_id": {"type": "keyword"},
                "from_entity_type": {"type": "keyword"},
                "from_entity_id": {"type": "keyword"},
                "to_entity_type": {"type": "keyword"},
                "to_entity_id": {"type": "keyword"},
                "binding_type": {"type": "keyword"},
                "metadata": {"type": "object"},
                "created_at": {"type": "date"},
                "updated_at": {"type": "date"},
            },
        },
        "settings": {
            "index": {
                "number_of_shards": number_of_shards,
                "number_of_replicas": number_of_replicas,
            }
        },
    }


class OpenSearchBindingStore(BindingStore):
    """OpenSearch-based binding store."""

    def __init__(
        self,
        client: OpenSearch,
        config: Optional[Dict[str, Any]] = None,
        binding_mapper: Optional[BindingMapper] = None,
        transformer: Optional[CriteriaTransformer] = None,
    ):
        """Initialize the store and, if enabled, create the collection index.

        Args:
            client: Externally owned OpenSearch client
            config: Overrides merged over ``DEFAULT_CONFIG`` (top-level keys)
            binding_mapper: Custom binding/document mapper
            transformer: Custom criteria transformer
        """
        self.client = client
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        self.collection_name = self.config["collection_name"]
        self.binding_mapper = binding_mapper or BindingMapper()
        self.transformer = transformer or CriteriaTransformer()

        performance = self.config.get("performance", {})
        self.batch_size = performance.get("batch_size", 100)
        self.refresh = performance.get("refresh", False)
        self.max_metadata_bytes = self.config.get("max_metadata_bytes", 64 * 1024)
        self.debug = bool(self.config.get("debug", False))

        self._initialize_schema()

    def _initialize_schema(self) -> None:
        if self.config.get("schema", {}).get("auto_create", True):
            self.ensure_collection_exists()

    def ensure_collection_exists(self) -> None:
        """Create the collection index if it doesn't exist."""
        schema = self.config.get("schema", {})
        definition = build_index_definition(
            number_of_shards=schema.get("number_of_shards", 1),
            number_of_replicas=schema.get("number_of_replicas", 0),
        )
        try:
            if not self.client.indices.exists(index=self.collection_name):
                self.client.indices.create(index=self.collection_name, body=definition)
                logger.info("Binding collection created", collection_name=self.collection_name)
        except Exception as e:
            logger.error(
                "Failed to create binding collection",
                collection_name=self.collection_name,
                error=str(e)
            )
            raise SchemaError.collection_creation_failed(
                self.collection_name, str(e), schema_definition=definition
            ) from e

    def _wrap_error(self, operation: str, message: str, error: Exception) -> BindingStoreError:
        if isinstance(error, exceptions.ConnectionError):
            return BindingStoreError.connection_error(operation, f"{message}: {error}")
        if isinstance(error, exceptions.TransportError):
            status = error.status_code
            if isinstance(status, int) and status < 500:
                return BindingStoreError.client_error(
                    operation, f"{message}: {error}", error_code=str(status)
                )
        return BindingStoreError.server_error(operation, f"{message}: {error}")

    def store(self, binding: Binding) -> None:
        """Store a single binding."""
        try:
            document = self.binding_mapper.to_document(binding)
            self.client.index(
                index=self.collection_name,
                id=binding.id,
                body=document,
                refresh=self.refresh,
            )
            logger.info(
                "Binding stored",
                binding_id=binding.id,
                binding_type=binding.type,
                collection_name=self.collection_name
            )
        except BindingStoreError:
            raise
        except Exception as e:
            logger.error("Failed to store binding", binding_id=binding.id, error=str(e))
            raise self._wrap_error("store", "Storage operation failed", e) from e

    def store_many(self, bindings: Iterable[Binding]) -> int:
        """Store multiple bindings with bulk requests of ``batch_size``."""
        actions = [
            {
                "_index": self.collection_name,
                "_id": binding.id,
                "_source": self.binding_mapper.to_document(binding),
            }
            for binding in bindings
        ]
        if not actions:
            return 0

        stored = 0
        try:
            for start in range(0, len(actions), self.batch_size):
                chunk = actions[start:start + self.batch_size]
                success_count, failed_items = bulk(
                    self.client, chunk, raise_on_error=False, refresh=self.refresh
                )
                stored += success_count
                if failed_items:
                    logger.warning(
                        "Some bindings failed to store",
                        failed_count=len(failed_items),
                        batch_count=len(chunk)
                    )
        except Exception as e:
            logger.error("Batch store failed", count=len(actions), stored=stored, error=str(e))
            raise self._wrap_error("store_many", "Batch storage failed", e) from e

        logger.info("Batch stored bindings", count=stored, collection_name=self.collection_name)
        return stored

    def find(self, binding_id: str) -> Optional[Binding]:
        """Find a binding by id; ``None`` when it does not exist."""
        try:
            response = self.client.get(index=self.collection_name, id=binding_id)
        except exceptions.NotFoundError:
            return None
        except Exception as e:
            logger.error("Failed to find binding", binding_id=binding_id, error=str(e))
            raise self._wrap_error("find", "Find operation failed", e) from e

        if not response.get("found", True):
            return None
        return self.binding_mapper.from_document(response)

    def delete(self, binding_id: str) -> None:
        try:
            self.client.delete(index=self.collection_name, id=binding_id, refresh=self.refresh)
        except exceptions.NotFoundError as e:
            logger.warning("Binding not found for delete", binding_id=binding_id)
            raise BindingStoreError.client_error(
                "delete", f"Failed to delete binding: {binding_id}", error_code="not_found"
            ) from e
        except Exception as e:
            logger.error("Failed to delete binding", binding_id=binding_id, error=str(e))
            raise self._wrap_error("delete", "Delete operation failed", e) from e

        logger.info("Binding deleted", binding_id=binding_id)

    def update_metadata(self, binding_id: str, metadata: Dict[str, Any]) -> None:
        """Replace the metadata of a stored binding.

        Raises
        - ``InvalidMetadataError`` if the metadata fails validation
        - ``BindingStoreError`` if the binding does not exist or the update fails
        """
        normalized = self.validate_and_normalize_metadata(metadata)
        update = {
            "metadata": self.binding_mapper.metadata_mapper.serialize(normalized),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.client.update(
                index=self.collection_name,
                id=binding_id,
                body={"doc": update},
                refresh=self.refresh,
            )
        except exceptions.NotFoundError as e:
            raise BindingStoreError.client_error(
                "update_metadata", f"Binding not found: {binding_id}", error_code="not_found"
            ) from e
        except Exception as e:
            logger.error("Metadata update failed", binding_id=binding_id, error=str(e))
            raise self._wrap_error("update_metadata", "Metadata update failed", e) from e

        logger.info("Binding metadata updated", binding_id=binding_id)

    def find_by_entity(self, entity_type: str, entity_id: str) -> List[Binding]:
        raise CapabilityNotAvailableError(Capability.OR_CONDITIONS, "find_by_entity")

    def find_between_entities(
        self,
        from_type: str,
        from_id: str,
        to_type: str,
        to_id: str,
        binding_type: Optional[str] = None
    ) -> List[Binding]:
        """Find bindings from one entity to another, optionally of one type."""
        query = self.query().from_(from_type, from_id).to(to_type, to_id)
        if binding_type is not None:
            query = query.type(binding_type)
        return list(query.get())

    def query(self) -> BasicQueryBuilder:
        """Create a query builder that executes against this store."""
        return BasicQueryBuilder(
            self.client,
            self.collection_name,
            execute_callback=self.execute_query,
        )

    def execute_query(self, query: QueryBuilder) -> QueryResult:
        """Run a builder's criteria as an OpenSearch search."""
        index = getattr(query, "collection_name", self.collection_name)
        body = self.transformer.build_search_body(query.get_criteria())

        if self.debug:
            logger.debug("Binding query body", collection_name=index, body=body)

        start = time.perf_counter()
        try:
            response = self.client.search(index=index, body=body)
        except Exception as e:
            logger.error("Binding query failed", collection_name=index, error=str(e))
            raise self._wrap_error("execute_query", "Query execution failed", e) from e

        bindings = [self.binding_mapper.from_document(hit) for hit in response["hits"]["hits"]]
        log_performance(
            "execute_query",
            (time.perf_counter() - start) * 1000,
            collection_name=index,
            results_count=len(bindings)
        )
        return QueryResult(bindings)

    def count(self, query: QueryBuilder) -> int:
        raise CapabilityNotAvailableError(Capability.RESULT_COUNT, "count")

    def delete_by_entity(self, entity_type: str, entity_id: str) -> int:
        raise CapabilityNotAvailableError(Capability.OR_CONDITIONS, "delete_by_entity")

    def extract_entity_id(self, entity: Any) -> str:
        """Extract an id from an ``Entity``, a ``get_id()`` method or an ``id`` attribute."""
        if isinstance(entity, Entity):
            return entity.get_id()

        get_id = getattr(entity, "get_id", None)
        if callable(get_id):
            entity_id = get_id()
            if isinstance(entity_id, str) and entity_id:
                return entity_id

        entity_id = getattr(entity, "id", None)
        if isinstance(entity_id, str) and entity_id:
            return entity_id

        raise EntityExtractionError(
            "Cannot extract entity ID. Entity must implement Entity, "
            "have a get_id() method, or an id attribute.",
            entity
        )

    def extract_entity_type(self, entity: Any) -> str:
        """Extract a type from an ``Entity`` or ``get_type()``, else the class name."""
        if isinstance(entity, Entity):
            return entity.get_type()

        get_type = getattr(entity, "get_type", None)
        if callable(get_type):
            entity_type = get_type()
            if isinstance(entity_type, str) and entity_type:
                return entity_type

        return type(entity).__name__

    def validate_and_normalize_metadata(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Check metadata types and size before it is written.

        Only JSON scalars, lists, dicts and ``datetime`` values are allowed.
        """
        self._validate_metadata_types(metadata)

        try:
            serialized = json.dumps(self.binding_mapper.metadata_mapper.serialize(metadata))
        except (BindingStoreError, TypeError, ValueError) as e:
            raise InvalidMetadataError("Metadata cannot be serialized to JSON") from e

        size = len(serialized.encode("utf-8"))
        if size > self.max_metadata_bytes:
            raise InvalidMetadataError(
                f"Metadata size ({size} bytes) exceeds limit ({self.max_metadata_bytes} bytes)"
            )

        return dict(metadata)

    def _validate_metadata_types(self, metadata: Dict[str, Any], path: str = "") -> None:
        for key, value in metadata.items():
            current_path = f"{path}.{key}" if path else str(key)

            if not isinstance(key, str):
                raise InvalidMetadataError(f"Metadata keys must be strings at path: {current_path}")

            if isinstance(value, dict):
                self._validate_metadata_types(value, current_path)
            elif isinstance(value, (list, tuple)):
                self._validate_metadata_types(
                    {str(index): item for index, item in enumerate(value)}, current_path
                )
            elif not isinstance(value, _SCALAR_TYPES + (datetime,)):
                raise InvalidMetadataError(
                    f"Invalid metadata type '{type(value).__name__}' at path: {current_path}. "
                    "Only JSON values and datetime objects are allowed."
                )

    def health_check(self) -> bool:
        """Check if OpenSearch is reachable."""
        try:
            return bool(self.client.ping())
        except Exception as e:
            logger.error("OpenSearch health check failed", error=str(e))
            return False
