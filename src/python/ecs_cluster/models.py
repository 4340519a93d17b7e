"""Data models for ECS cluster discovery.

Directory responses are parsed into Pydantic models whose nested
collections default to empty and whose leaf values default to ``None``,
so a missing field is an explicit absence rather than an exception.
"""

from __future__ import annotations

import enum
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import DiscoveryError


# ── Enums ─────────────────────────────────────────────────────────


class AddressMode(str, enum.Enum):
    """Which task attachment shape member addresses are read from."""

    IPV4 = "ipv4"
    DNS = "dns"
    AUTO = "auto"


class DiscoveryStatus(str, enum.Enum):
    """Outcome of a single discovery poll."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ReconcilerState(str, enum.Enum):
    """Lifecycle state of the membership reconciler loop."""

    IDLE = "idle"
    POLLING = "polling"
    RECONCILING = "reconciling"


# ── Directory Response Models ─────────────────────────────────────


class _DirectoryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


class ListServicesPage(_DirectoryModel):
    """One page of a ``ListServices`` response."""

    service_arns: list[str] = Field(alias="serviceArns")
    next_token: str | None = Field(default=None, alias="nextToken")


class ListTasksPage(_DirectoryModel):
    """A ``ListTasks`` response."""

    task_arns: list[str] = Field(alias="taskArns")


class NetworkInterface(_DirectoryModel):
    private_ipv4_address: str | None = Field(default=None, alias="privateIpv4Address")


class Container(_DirectoryModel):
    name: str | None = None
    network_interfaces: list[NetworkInterface] = Field(
        default_factory=list, alias="networkInterfaces"
    )

    @field_validator("network_interfaces", mode="before")
    @classmethod
    def _default_interfaces(cls, value: Any) -> Any:
        return _none_as_empty(value)


class AttachmentDetail(_DirectoryModel):
    name: str | None = None
    value: str | None = None


class Attachment(_DirectoryModel):
    type: str | None = None
    details: list[AttachmentDetail] = Field(default_factory=list)

    @field_validator("details", mode="before")
    @classmethod
    def _default_details(cls, value: Any) -> Any:
        return _none_as_empty(value)


class TaskDetail(_DirectoryModel):
    """A described task with its container and attachment metadata."""

    task_arn: str | None = Field(default=None, alias="taskArn")
    containers: list[Container] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)

    @field_validator("containers", "attachments", mode="before")
    @classmethod
    def _default_collections(cls, value: Any) -> Any:
        return _none_as_empty(value)


class DescribeTasksResponse(_DirectoryModel):
    """A ``DescribeTasks`` response. ``tasks`` is mandatory."""

    tasks: list[TaskDetail]


# ── Results ───────────────────────────────────────────────────────


class DiscoveryResult(BaseModel):
    """Result of one ``get_candidate_members`` poll.

    Attributes:
        status: Whether the poll succeeded or failed.
        members: Member identifiers discovered (empty on failure).
        address_mode: The concrete address mode members were read with.
        error: The classified error if the poll failed.
        timestamp: When the result was produced.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: DiscoveryStatus = DiscoveryStatus.SUCCEEDED
    members: frozenset[str] = Field(default_factory=frozenset)
    address_mode: AddressMode | None = None
    error: DiscoveryError | None = None
    timestamp: float = Field(default_factory=time.time)

    @property
    def is_success(self) -> bool:
        return self.status == DiscoveryStatus.SUCCEEDED

    @staticmethod
    def success(
        members: frozenset[str] | set[str], address_mode: AddressMode | None = None
    ) -> DiscoveryResult:
        """Create a successful discovery result."""
        return DiscoveryResult(
            status=DiscoveryStatus.SUCCEEDED, members=frozenset(members), address_mode=address_mode
        )

    @staticmethod
    def failure(error: DiscoveryError) -> DiscoveryResult:
        """Create a failed discovery result."""
        return DiscoveryResult(status=DiscoveryStatus.FAILED, error=error)


class MembershipOutcome(BaseModel):
    """Outcome of a connect/disconnect call on the membership manager.

    An empty ``failed`` list means full success; otherwise it lists
    ``(identifier, reason)`` pairs that could not be applied.
    """

    failed: list[tuple[str, str]] = Field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return not self.failed

    @property
    def failed_members(self) -> set[str]:
        return {member for member, _ in self.failed}

    @staticmethod
    def ok() -> MembershipOutcome:
        return MembershipOutcome()

    @staticmethod
    def partial_failure(failed: list[tuple[str, str]]) -> MembershipOutcome:
        return MembershipOutcome(failed=list(failed))


class ReconcileReport(BaseModel):
    """What a single reconcile cycle observed and applied."""

    added: frozenset[str] = Field(default_factory=frozenset)
    """Members the cycle tried to connect."""

    removed: frozenset[str] = Field(default_factory=frozenset)
    """Members the cycle tried to disconnect."""

    failed_connect: frozenset[str] = Field(default_factory=frozenset)
    """Members that could not be connected and were dropped."""

    failed_disconnect: frozenset[str] = Field(default_factory=frozenset)
    """Members that could not be disconnected and were kept."""

    members: frozenset[str] = Field(default_factory=frozenset)
    """Authoritative membership after the cycle."""

    poll_error: str | None = None
    """Error detail if the poll failed and membership was left unchanged."""

    @property
    def is_success(self) -> bool:
        return self.poll_error is None
