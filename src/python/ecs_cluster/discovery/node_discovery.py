"""Discovery entry point: one read-only poll of the ECS directory."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..config import validate_config
from ..directory.directory_client import DirectoryClient
from ..directory.directory_service import DirectoryService
from ..exceptions import ConfigValidationError, DiscoveryError, ExtractionError
from ..models import AddressMode, DiscoveryResult
from .address_extractor import extract_addresses
from .self_exclusion import member_identifier, self_exclusion_for
from .task_collector import collect_task_arns

logger = logging.getLogger(__name__)


def get_candidate_members(
    config: Mapping[str, Any],
    directory: DirectoryService | DirectoryClient,
    *,
    local_identity: str | None = None,
    hostname: str | None = None,
    pinned_mode: AddressMode | None = None,
) -> DiscoveryResult:
    """Discover the member identifiers currently running in ECS.

    Validates *config*, lists the configured services' running tasks,
    describes them, extracts one address per task, drops the local node
    and prefixes each address with ``name_prefix@``.

    Args:
        config: Raw configuration mapping (see :mod:`ecs_cluster.config`).
        directory: The directory service (or an already wrapped client).
        local_identity: This node's registered member identifier, if known.
        hostname: This host's name, used to derive its private IP.
        pinned_mode: Mode an ``auto`` configuration resolved to earlier.
            A batch that resolves to a different mode fails the poll
            instead of renaming every member.

    Returns:
        A successful :class:`DiscoveryResult` with the member set and the
        resolved address mode, or a failed one carrying the classified
        :class:`DiscoveryError`.

    Raises:
        ConfigError: A required configuration key is missing entirely.
    """
    client = directory if isinstance(directory, DirectoryClient) else DirectoryClient(directory)

    try:
        cfg = validate_config(config)
        task_arns = collect_task_arns(client, cfg)
        document = client.describe_tasks(cfg.cluster, task_arns, cfg.region)
        mode, addresses = extract_addresses(document, cfg.address_mode)
        if (
            cfg.address_mode == AddressMode.AUTO
            and pinned_mode is not None
            and addresses
            and mode != pinned_mode
        ):
            raise ExtractionError(
                f"address mode changed from {pinned_mode.value} to {mode.value}"
            )
        exclusion = self_exclusion_for(
            mode,
            cfg.name_prefix,
            local_identity=local_identity,
            hostname=hostname,
        )
        addresses = exclusion.apply(addresses)
    except ConfigValidationError as e:
        logger.warning("ECS strategy is selected, but %s is not configured correctly!", e.field)
        return DiscoveryResult.failure(e)
    except DiscoveryError as e:
        logger.warning("Error %s while determining nodes in cluster via ECS strategy.", e)
        return DiscoveryResult.failure(e)

    members = {member_identifier(cfg.name_prefix, a) for a in addresses}
    logger.debug(
        "Discovered %d member(s) from %d task(s) in %s", len(members), len(task_arns), cfg.cluster
    )
    return DiscoveryResult.success(members, address_mode=mode)
