"""Mapping between ``Binding`` objects and stored OpenSearch documents.

``MetadataMapper`` turns metadata into JSON-safe structures (datetimes as
ISO-8601 strings) and back. ``BindingMapper`` builds the full document from a
binding and rebuilds the binding from a document or search hit.
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from ..models import Binding
from .base import BindingStoreError

_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?([+-]\d{2}:\d{2}|Z)?$"
)


class MetadataMapper:
    """Serialize binding metadata for storage and restore it on read."""

    def serialize(self, metadata: Mapping[str, Any]) -> Dict[str, Any]:
        """Convert metadata into JSON-compatible data.

        Raises
        - ``BindingStoreError`` if the result cannot be encoded as JSON
        """
        processed = {key: self._to_storable(value) for key, value in metadata.items()}
        try:
            json.dumps(processed)
        except (TypeError, ValueError) as e:
            raise BindingStoreError(
                "serialize_metadata", f"Failed to serialize metadata: {e}"
            ) from e
        return processed

    def deserialize(self, data: Union[None, str, Mapping[str, Any]]) -> Dict[str, Any]:
        """Restore metadata, accepting a mapping or a JSON string."""
        if data is None or data == "" or data == {}:
            return {}

        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError as e:
                raise BindingStoreError(
                    "deserialize_metadata", f"Failed to deserialize metadata: {e}"
                ) from e

        if not isinstance(data, Mapping):
            raise BindingStoreError(
                "deserialize_metadata",
                f"Failed to deserialize metadata: expected an object, got {type(data).__name__}",
            )

        return {key: self._from_storable(value) for key, value in data.items()}

    def _to_storable(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Mapping):
            return {key: self._to_storable(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._to_storable(item) for item in value]
        return value

    def _from_storable(self, value: Any) -> Any:
        if isinstance(value, str) and _ISO_DATETIME.match(value):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return value
        if isinstance(value, Mapping):
            return {key: self._from_storable(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._from_storable(item) for item in value]
        return value


class BindingMapper:
    """Convert bindings to stored documents and back."""

    def __init__(self, metadata_mapper: Optional[MetadataMapper] = None):
        self.metadata_mapper = metadata_mapper or MetadataMapper()

    def to_document(self, binding: Binding) -> Dict[str, Any]:
        return {
            "binding_id": binding.id,
            "from_entity_type": binding.from_type,
            "from_entity_id": binding.from_id,
            "to_entity_type": binding.to_type,
            "to_entity_id": binding.to_id,
            "binding_type": binding.type,
            "metadata": self.metadata_mapper.serialize(binding.metadata),
            "created_at": binding.created_at.isoformat(),
            "updated_at": binding.updated_at.isoformat(),
        }

    def from_document(self, document: Mapping[str, Any]) -> Binding:
        """Build a binding from a ``_source`` mapping or a full search hit."""
        source = document.get("_source", document)

        return Binding(
            id=source["binding_id"],
            from_type=source["from_entity_type"],
            from_id=source["from_entity_id"],
            to_type=source["to_entity_type"],
            to_id=source["to_entity_id"],
            type=source["binding_type"],
            metadata=self.metadata_mapper.deserialize(source.get("metadata")),
            created_at=_parse_datetime(source["created_at"]),
            updated_at=_parse_datetime(source["updated_at"]),
        )


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
