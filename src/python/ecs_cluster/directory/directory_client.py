"""Directory client adapter.

Wraps a :class:`DirectoryService` with pagination and response-shape
checking so the discovery pipeline only ever sees plain lists of ARNs
or a :class:`DirectoryError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from time import time
from typing import Any, TypeVar

from prometheus_client import Counter, Histogram
from pydantic import BaseModel, ValidationError

from ..exceptions import DirectoryError
from ..models import ListServicesPage, ListTasksPage
from .directory_service import DirectoryService

logger = logging.getLogger(__name__)

UNRECOGNIZED_SHAPE = "unrecognized response shape"

ModelT = TypeVar("ModelT", bound=BaseModel)

DIRECTORY_EXE_COUNTER = Counter(
    "ecs_cluster_directory_exe_total",
    "Total number of directory calls executed",
    ["operation", "outcome"],
)
DIRECTORY_EXE_DURATION_HISTOGRAM = Histogram(
    "ecs_cluster_directory_exe_duration_seconds",
    "Duration of directory calls in seconds",
    ["operation"],
)


class DirectoryClient:
    """Uniform, error-typed access to the directory service.

    Parameters:
        directory_service: The transport-level :class:`DirectoryService`.
    """

    def __init__(self, directory_service: DirectoryService) -> None:
        self._service = directory_service

    def list_services(self, cluster: str, region: str) -> list[str]:
        """List every service ARN in *cluster*, following ``nextToken``."""
        service_arns: list[str] = []
        next_token: str | None = None
        pages = 0
        while True:
            body = self._call("ListServices", self._service.list_services, cluster, region, next_token)
            page = self._parse("ListServices", ListServicesPage, body)
            service_arns.extend(page.service_arns)
            pages += 1
            if not page.next_token:
                break
            next_token = page.next_token
        logger.debug(
            "Listed %d services in %s across %d page(s)", len(service_arns), cluster, pages
        )
        return service_arns

    def list_tasks(self, cluster: str, service: str, region: str) -> list[str]:
        """List the ARNs of RUNNING tasks for *service* (single page)."""
        body = self._call("ListTasks", self._service.list_tasks, cluster, service, region, "RUNNING")
        return self._parse("ListTasks", ListTasksPage, body).task_arns

    def describe_tasks(
        self, cluster: str, tasks: Sequence[str], region: str
    ) -> Mapping[str, Any]:
        """Describe *tasks* and return the raw document.

        The document is validated by the address extractor, which owns
        the decision of what a malformed task list means.
        """
        if not tasks:
            return {"tasks": []}
        body = self._call("DescribeTasks", self._service.describe_tasks, cluster, list(tasks), region)
        if not isinstance(body, Mapping):
            raise DirectoryError("DescribeTasks", UNRECOGNIZED_SHAPE)
        return body

    # ── Internal ──────────────────────────────────────────────────

    @staticmethod
    def _call(operation: str, fn: Callable[..., Any], *args: Any) -> Any:
        start_time = time()
        outcome = "ok"
        try:
            return fn(*args)
        except DirectoryError:
            outcome = "error"
            raise
        except Exception as e:
            outcome = "error"
            raise DirectoryError(operation, str(e) or e.__class__.__name__) from e
        finally:
            DIRECTORY_EXE_COUNTER.labels(operation=operation, outcome=outcome).inc()
            DIRECTORY_EXE_DURATION_HISTOGRAM.labels(operation=operation).observe(time() - start_time)

    @staticmethod
    def _parse(operation: str, model: type[ModelT], body: Any) -> ModelT:
        if not isinstance(body, Mapping):
            raise DirectoryError(operation, UNRECOGNIZED_SHAPE)
        try:
            return model.model_validate(dict(body))
        except ValidationError as e:
            raise DirectoryError(operation, UNRECOGNIZED_SHAPE) from e
