"""Shared fixtures for binding store tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from edgebinder_vector.models import Binding


@pytest.fixture
def mock_client():
    """OpenSearch client stand-in whose collection index already exists."""
    client = MagicMock()
    client.indices.exists.return_value = True
    client.ping.return_value = True
    return client


@pytest.fixture
def make_binding():
    """Factory for bindings with fixed timestamps."""
    def _make(binding_id="binding-1", binding_type="has_access", metadata=None):
        timestamp = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        return Binding(
            id=binding_id,
            from_type="Workspace",
            from_id="workspace-123",
            to_type="Project",
            to_id="project-456",
            type=binding_type,
            metadata=metadata if metadata is not None else {"access_level": "write"},
            created_at=timestamp,
            updated_at=timestamp,
        )
    return _make
