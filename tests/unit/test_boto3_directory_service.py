"""Tests for the boto3-backed directory service."""

from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from ecs_cluster.directory.boto3_directory_service import Boto3DirectoryService
from ecs_cluster.exceptions import DirectoryError


class FakeEcsClient:
    def __init__(self):
        self.requests = []
        self.error = None

    def _record(self, method, params):
        self.requests.append((method, params))
        if self.error is not None:
            raise self.error

    def list_services(self, **params):
        self._record("list_services", params)
        return {"serviceArns": ["svc"], "ResponseMetadata": {}}

    def list_tasks(self, **params):
        self._record("list_tasks", params)
        return {"taskArns": ["t1"]}

    def describe_tasks(self, **params):
        self._record("describe_tasks", params)
        return {
            "tasks": [{"taskArn": arn} for arn in params["tasks"]],
            "failures": [{"arn": "gone", "reason": "MISSING"}] if "gone" in params["tasks"] else [],
        }


@pytest.fixture
def ecs():
    return FakeEcsClient()


@pytest.fixture
def session(ecs):
    created = []

    def client(service_name, **kwargs):
        created.append((service_name, kwargs))
        return ecs

    return SimpleNamespace(client=client, created=created)


def test_client_is_cached_per_region(session):
    service = Boto3DirectoryService(request_timeout=3.0, session=session)
    service.list_services("prod", "eu-west-1")
    service.list_services("prod", "eu-west-1")
    service.list_services("prod", "us-east-1")
    regions = [kwargs["region_name"] for name, kwargs in session.created]
    assert regions == ["eu-west-1", "us-east-1"]
    assert all(name == "ecs" for name, _ in session.created)
    config = session.created[0][1]["config"]
    assert config.connect_timeout == 3.0
    assert config.read_timeout == 3.0


def test_endpoint_override(session):
    Boto3DirectoryService(session=session, endpoint_url="http://localhost:4566").list_tasks(
        "prod", "svc", "eu-west-1"
    )
    assert session.created[0][1]["endpoint_url"] == "http://localhost:4566"


def test_request_parameters(session, ecs):
    service = Boto3DirectoryService(session=session)
    service.list_services("prod", "eu-west-1")
    service.list_services("prod", "eu-west-1", next_token="tok")
    service.list_tasks("prod", "svc", "eu-west-1")
    assert ecs.requests == [
        ("list_services", {"cluster": "prod"}),
        ("list_services", {"cluster": "prod", "nextToken": "tok"}),
        ("list_tasks", {"cluster": "prod", "serviceName": "svc", "desiredStatus": "RUNNING"}),
    ]


def test_describe_tasks_is_batched(session, ecs):
    arns = [f"t{i}" for i in range(150)] + ["gone"]
    body = Boto3DirectoryService(session=session).describe_tasks("prod", arns, "eu-west-1")
    batches = [params["tasks"] for method, params in ecs.requests]
    assert [len(b) for b in batches] == [100, 51]
    assert len(body["tasks"]) == 151
    assert body["failures"] == [{"arn": "gone", "reason": "MISSING"}]


def test_client_error_becomes_directory_error(session, ecs):
    ecs.error = ClientError(
        {"Error": {"Code": "ClusterNotFoundException", "Message": "Cluster not found."}},
        "ListServices",
    )
    with pytest.raises(DirectoryError) as exc_info:
        Boto3DirectoryService(session=session).list_services("prod", "eu-west-1")
    assert exc_info.value.operation == "ListServices"
    assert "ClusterNotFoundException" in exc_info.value.reason


def test_botocore_error_becomes_directory_error(session, ecs):
    ecs.error = EndpointConnectionError(endpoint_url="https://ecs.eu-west-1.amazonaws.com")
    with pytest.raises(DirectoryError) as exc_info:
        Boto3DirectoryService(session=session).list_tasks("prod", "svc", "eu-west-1")
    assert exc_info.value.operation == "ListTasks"
