"""Shared fakes for the ECS discovery tests."""

from __future__ import annotations

from typing import Any

import pytest

from ecs_cluster.cluster.membership_manager import MembershipManager
from ecs_cluster.directory.directory_service import DirectoryService
from ecs_cluster.models import MembershipOutcome

SERVICE_ARN_PREFIX = "arn:aws:ecs:eu-west-1:123456789012:service/prod/"
TASK_ARN_PREFIX = "arn:aws:ecs:eu-west-1:123456789012:task/prod/"


def service_arn(name: str) -> str:
    return SERVICE_ARN_PREFIX + name


def task_arn(name: str) -> str:
    return TASK_ARN_PREFIX + name


def ipv4_task(arn: str, *ips: str | None) -> dict[str, Any]:
    return {
        "taskArn": arn,
        "containers": [
            {"name": "app", "networkInterfaces": [{"privateIpv4Address": ip} for ip in ips]}
        ],
    }


def dns_task(arn: str, dns_name: str | None) -> dict[str, Any]:
    details = [{"name": "subnetId", "value": "subnet-1"}]
    if dns_name is not None:
        details.append({"name": "privateDnsName", "value": dns_name})
    return {
        "taskArn": arn,
        "attachments": [{"type": "ElasticNetworkInterface", "details": details}],
    }


class FakeDirectoryService(DirectoryService):
    """In-memory directory with scripted pages and recorded calls."""

    def __init__(
        self,
        service_pages: list[Any] | None = None,
        tasks_by_service: dict[str, list[str]] | None = None,
        task_details: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self.service_pages = service_pages or [{"serviceArns": []}]
        self.tasks_by_service = tasks_by_service or {}
        self.task_details = task_details or {}
        self.describe_response: Any = None
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, tuple]] = []

    def list_services(self, cluster, region, next_token=None):
        self.calls.append(("list_services", (cluster, region, next_token)))
        if "list_services" in self.errors:
            raise self.errors["list_services"]
        index = int(next_token) if next_token else 0
        return self.service_pages[index]

    def list_tasks(self, cluster, service, region, desired_status="RUNNING"):
        self.calls.append(("list_tasks", (cluster, service, region, desired_status)))
        if "list_tasks" in self.errors:
            raise self.errors["list_tasks"]
        return {"taskArns": list(self.tasks_by_service.get(service, []))}

    def describe_tasks(self, cluster, tasks, region):
        self.calls.append(("describe_tasks", (cluster, list(tasks), region)))
        if "describe_tasks" in self.errors:
            raise self.errors["describe_tasks"]
        if self.describe_response is not None:
            return self.describe_response
        return {"tasks": [self.task_details[t] for t in tasks if t in self.task_details]}

    def set_running(self, service: str, tasks: dict[str, dict[str, Any]]) -> None:
        """Replace the running tasks of *service* with *tasks* (arn → detail)."""
        self.tasks_by_service[service_arn(service)] = list(tasks)
        self.task_details.update(tasks)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class FakeMembershipManager(MembershipManager):
    """Records calls; failures and exceptions can be scripted per member."""

    def __init__(self, identity: str | None = None) -> None:
        self.identity = identity
        self.connected: set[str] = set()
        self.connect_calls: list[list[str]] = []
        self.disconnect_calls: list[list[str]] = []
        self.fail_connect: dict[str, str] = {}
        self.fail_disconnect: dict[str, str] = {}
        self.raise_on_connect: Exception | None = None
        self.raise_on_disconnect: Exception | None = None

    def connect(self, members):
        self.connect_calls.append(list(members))
        if self.raise_on_connect is not None:
            raise self.raise_on_connect
        failed = [(m, self.fail_connect[m]) for m in members if m in self.fail_connect]
        self.connected.update(m for m in members if m not in self.fail_connect)
        return MembershipOutcome.partial_failure(failed) if failed else MembershipOutcome.ok()

    def disconnect(self, members):
        self.disconnect_calls.append(list(members))
        if self.raise_on_disconnect is not None:
            raise self.raise_on_disconnect
        failed = [(m, self.fail_disconnect[m]) for m in members if m in self.fail_disconnect]
        self.connected.difference_update(m for m in members if m not in self.fail_disconnect)
        return MembershipOutcome.partial_failure(failed) if failed else MembershipOutcome.ok()

    def self_identity(self):
        return self.identity


@pytest.fixture
def base_config() -> dict[str, Any]:
    return {
        "cluster": "prod",
        "service_names": ["svc-1"],
        "region": "eu-west-1",
    }


@pytest.fixture
def directory() -> FakeDirectoryService:
    """Two services; ``svc-1`` runs two tasks with private IPs."""
    fake = FakeDirectoryService(
        service_pages=[{"serviceArns": [service_arn("svc-1"), service_arn("svc-2")]}],
    )
    fake.set_running(
        "svc-1",
        {
            task_arn("a"): ipv4_task(task_arn("a"), "10.0.0.5"),
            task_arn("b"): ipv4_task(task_arn("b"), "10.0.0.6"),
        },
    )
    fake.set_running("svc-2", {task_arn("c"): ipv4_task(task_arn("c"), "10.0.1.9")})
    return fake


@pytest.fixture
def manager() -> FakeMembershipManager:
    return FakeMembershipManager()
