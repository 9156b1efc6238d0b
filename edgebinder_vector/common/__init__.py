"""Common utilities shared across the adapter.

Includes:
- ``config``: pydantic-settings configuration from ``EDGEBINDER_*`` variables.
- ``logging``: structured logging setup with structlog.

Import pattern:
- from edgebinder_vector.common.config import AdapterSettings
- from edgebinder_vector.common.logging import configure_logging
"""
