"""Extracts member addresses from a ``DescribeTasks`` document.

Two task shapes are supported:

* **ipv4**: ``tasks[].containers[].networkInterfaces[].privateIpv4Address``
  (bridge/host/awsvpc containers report their private IP).
* **dns**: ``tasks[].attachments[type=ElasticNetworkInterface].details[]``
  entry named ``privateDnsName`` (awsvpc tasks report a fully-qualified
  private host name such as ``ip-10-0-1-2.eu-west-1.compute.internal``).

Tasks and attachments without a usable address are skipped; a missing
top-level ``tasks`` field fails the whole batch.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..exceptions import ExtractionError
from ..models import AddressMode, AttachmentDetail, DescribeTasksResponse, TaskDetail

NETWORK_INTERFACE_ATTACHMENT = "ElasticNetworkInterface"
PRIVATE_DNS_NAME = "privateDnsName"


def parse_described_tasks(document: Any) -> list[TaskDetail]:
    """Validate a raw ``DescribeTasks`` document into task models."""
    if not isinstance(document, Mapping) or "tasks" not in document:
        raise ExtractionError("missing 'tasks' field")
    try:
        return DescribeTasksResponse.model_validate(dict(document)).tasks
    except ValidationError as e:
        raise ExtractionError(f"malformed task list: {e.error_count()} error(s)") from e


def extract_ipv4_addresses(tasks: list[TaskDetail]) -> list[str]:
    return [
        interface.private_ipv4_address
        for task in tasks
        for container in task.containers
        for interface in container.network_interfaces
        if interface.private_ipv4_address
    ]


def extract_dns_addresses(tasks: list[TaskDetail]) -> list[str]:
    addresses: list[str] = []
    for task in tasks:
        for attachment in task.attachments:
            if attachment.type != NETWORK_INTERFACE_ATTACHMENT:
                continue
            dns_name = _private_dns_name(attachment.details)
            if dns_name:
                addresses.append(dns_name)
    return addresses


def _private_dns_name(details: list[AttachmentDetail]) -> str | None:
    for detail in details:
        if detail.name == PRIVATE_DNS_NAME:
            return detail.value
    return None


def detect_address_mode(tasks: list[TaskDetail]) -> AddressMode:
    """Pick ``DNS`` if any task exposes a private DNS name, else ``IPV4``."""
    return AddressMode.DNS if extract_dns_addresses(tasks) else AddressMode.IPV4


def extract_addresses(
    document: Any, mode: AddressMode = AddressMode.IPV4
) -> tuple[AddressMode, list[str]]:
    """Extract one address per usable task attachment.

    Args:
        document: Raw ``DescribeTasks`` response.
        mode: Extraction strategy; ``AUTO`` is resolved per batch.

    Returns:
        ``(resolved_mode, addresses)``: the concrete mode used (never
        ``AUTO``) and the addresses in task order.  May be empty.

    Raises:
        ExtractionError: The document has no ``tasks`` field or a task
            entry cannot be parsed.
    """
    tasks = parse_described_tasks(document)
    if mode == AddressMode.AUTO:
        mode = detect_address_mode(tasks)
    if mode == AddressMode.DNS:
        return mode, extract_dns_addresses(tasks)
    return mode, extract_ipv4_addresses(tasks)
