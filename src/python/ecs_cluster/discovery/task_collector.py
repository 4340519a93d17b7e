"""Collects running task ARNs for every configured service."""

from __future__ import annotations

import logging

from ..config import DiscoveryConfig
from ..directory.directory_client import DirectoryClient
from .service_resolver import resolve_service

logger = logging.getLogger(__name__)


def collect_task_arns(client: DirectoryClient, config: DiscoveryConfig) -> list[str]:
    """Return the RUNNING task ARNs of each configured service, in order.

    Services are listed once; each configured name is then resolved and
    its tasks appended.  The first error from any step propagates, so a
    single unmatched service fails the whole collection.  Duplicates
    across services are kept.
    """
    service_arns = client.list_services(config.cluster, config.region)

    task_arns: list[str] = []
    for service_name in config.service_names:
        service_arn = resolve_service(service_arns, service_name)
        tasks = client.list_tasks(config.cluster, service_arn, config.region)
        logger.debug("Service %s has %d running task(s)", service_arn, len(tasks))
        task_arns.extend(tasks)
    return task_arns
