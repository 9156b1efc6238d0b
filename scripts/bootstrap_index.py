#!/usr/bin/env python3
"""OpenSearch bootstrap script for the binding store.

Waits for the cluster and creates the binding collection index with the
mapping the store expects. Connection defaults come from ``EDGEBINDER_*``
environment variables; command-line flags override them.
"""

import argparse
import sys
import time
from typing import List, Optional

import structlog
from opensearchpy import OpenSearch

from edgebinder_vector.common.config import AdapterSettings
from edgebinder_vector.common.logging import configure_logging_from_settings
from edgebinder_vector.vector_store.base import SchemaError
from edgebinder_vector.vector_store.factory import create_opensearch_client
from edgebinder_vector.vector_store.opensearch import OpenSearchBindingStore

logger = structlog.get_logger("bootstrap_index")


def wait_for_cluster(client: OpenSearch, timeout: int = 60, interval: float = 5.0) -> None:
    """Wait for OpenSearch cluster to be ready."""
    start_time = time.time()

    while time.time() - start_time < timeout:
        try:
            health = client.cluster.health()
            if health["status"] in ["green", "yellow"]:
                logger.info("OpenSearch cluster is ready", status=health["status"])
                return
            logger.info("Waiting for OpenSearch cluster", status=health["status"])
        except Exception as e:
            logger.warning("Failed to check cluster health", error=str(e))
        time.sleep(interval)

    raise TimeoutError("OpenSearch cluster did not become ready within timeout")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create the binding collection index in OpenSearch")
    parser.add_argument("--hosts", help="OpenSearch hosts (comma-separated)")
    parser.add_argument("--username", help="OpenSearch username")
    parser.add_argument("--password", help="OpenSearch password")
    parser.add_argument("--verify-certs", action="store_true", help="Verify SSL certificates")
    parser.add_argument("--collection", help="Binding collection (index) name")
    parser.add_argument("--shards", type=int, help="Number of primary shards")
    parser.add_argument("--replicas", type=int, help="Number of replicas")
    parser.add_argument("--wait-timeout", type=int, default=60, help="Cluster wait timeout in seconds")
    return parser


def settings_from_args(args: argparse.Namespace, settings: Optional[AdapterSettings] = None) -> AdapterSettings:
    """Overlay command-line flags on environment settings."""
    settings = settings or AdapterSettings()
    overrides = {
        "opensearch_hosts": args.hosts,
        "opensearch_username": args.username,
        "opensearch_password": args.password,
        "collection_name": args.collection,
        "number_of_shards": args.shards,
        "number_of_replicas": args.replicas,
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    if args.verify_certs:
        update["opensearch_verify_certs"] = True
    # Index creation is the whole point of this script.
    update["schema_auto_create"] = True
    return settings.model_copy(update=update)


def main(argv: Optional[List[str]] = None, client: Optional[OpenSearch] = None) -> int:
    """Main bootstrap function. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    configure_logging_from_settings(settings, "bootstrap-index")

    client = client or create_opensearch_client(settings)

    try:
        wait_for_cluster(client, args.wait_timeout)
        store = OpenSearchBindingStore(client, settings.to_adapter_config())
        logger.info("Binding index bootstrap completed", collection_name=store.collection_name)
        return 0
    except (SchemaError, TimeoutError) as e:
        logger.error("Binding index bootstrap failed", error=str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
