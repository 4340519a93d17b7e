"""boto3-backed :class:`DirectoryService` for the AWS ECS API."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import DirectoryError
from .directory_service import DirectoryService

logger = logging.getLogger(__name__)

# DescribeTasks accepts at most this many task ARNs per request
_DESCRIBE_TASKS_BATCH = 100


class Boto3DirectoryService(DirectoryService):
    """Queries ECS through boto3, one cached client per region.

    Parameters:
        request_timeout: Connect and read timeout (seconds) applied to
            every ECS request.
        max_attempts: botocore retry budget per request.
        session: Optional pre-configured :class:`boto3.session.Session`
            (profiles, explicit credentials, endpoint overrides).
        endpoint_url: Optional endpoint override (e.g. a local emulator).
    """

    def __init__(
        self,
        request_timeout: float = 10.0,
        max_attempts: int = 3,
        session: boto3.session.Session | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        self._session = session or boto3.session.Session()
        self._endpoint_url = endpoint_url
        self._botocore_config = Config(
            connect_timeout=request_timeout,
            read_timeout=request_timeout,
            retries={"max_attempts": max_attempts, "mode": "standard"},
        )
        self._clients: dict[str, Any] = {}
        self._clients_lock = threading.Lock()

    def list_services(
        self, cluster: str, region: str, next_token: str | None = None
    ) -> Mapping[str, Any]:
        params: dict[str, Any] = {"cluster": cluster}
        if next_token:
            params["nextToken"] = next_token
        return self._request("ListServices", region, "list_services", **params)

    def list_tasks(
        self,
        cluster: str,
        service: str,
        region: str,
        desired_status: str = "RUNNING",
    ) -> Mapping[str, Any]:
        return self._request(
            "ListTasks",
            region,
            "list_tasks",
            cluster=cluster,
            serviceName=service,
            desiredStatus=desired_status,
        )

    def describe_tasks(
        self, cluster: str, tasks: Sequence[str], region: str
    ) -> Mapping[str, Any]:
        described: list[Any] = []
        failures: list[Any] = []
        for start in range(0, len(tasks), _DESCRIBE_TASKS_BATCH):
            batch = list(tasks[start:start + _DESCRIBE_TASKS_BATCH])
            body = self._request("DescribeTasks", region, "describe_tasks", cluster=cluster, tasks=batch)
            if "tasks" not in body:
                # Let the extractor reject the malformed document
                return body
            described.extend(body.get("tasks") or [])
            failures.extend(body.get("failures") or [])
        if failures:
            logger.warning("DescribeTasks reported %d failure(s): %s", len(failures), failures)
        return {"tasks": described, "failures": failures}

    # ── Internal ──────────────────────────────────────────────────

    def _client(self, region: str) -> Any:
        with self._clients_lock:
            client = self._clients.get(region)
            if client is None:
                kwargs: dict[str, Any] = {
                    "region_name": region,
                    "config": self._botocore_config,
                }
                if self._endpoint_url:
                    kwargs["endpoint_url"] = self._endpoint_url
                client = self._session.client("ecs", **kwargs)
                self._clients[region] = client
            return client

    def _request(self, operation: str, region: str, method: str, **params: Any) -> Mapping[str, Any]:
        try:
            return getattr(self._client(region), method)(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "ClientError")
            raise DirectoryError(operation, f"{code}: {e}") from e
        except BotoCoreError as e:
            raise DirectoryError(operation, str(e)) from e
