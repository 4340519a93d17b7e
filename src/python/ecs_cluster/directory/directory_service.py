"""Abstract base class for the ECS control-plane read API.

Implementations perform the actual (signed) requests and return the raw
decoded JSON document of each call.  They must raise
:class:`~ecs_cluster.exceptions.DirectoryError` for transport failures.
"""

from __future__ import annotations

import abc
from collections.abc import Mapping, Sequence
from typing import Any


class DirectoryService(abc.ABC):
    """Read-only view of an ECS cluster's services and tasks."""

    @abc.abstractmethod
    def list_services(
        self, cluster: str, region: str, next_token: str | None = None
    ) -> Mapping[str, Any]:
        """Return one page of ``ListServices``.

        Returns:
            A document shaped like
            ``{"serviceArns": [...], "nextToken": "..."}``; ``nextToken``
            is absent (or ``None``) on the last page.
        """
        ...

    @abc.abstractmethod
    def list_tasks(
        self,
        cluster: str,
        service: str,
        region: str,
        desired_status: str = "RUNNING",
    ) -> Mapping[str, Any]:
        """Return ``ListTasks`` for *service*, shaped like ``{"taskArns": [...]}``."""
        ...

    @abc.abstractmethod
    def describe_tasks(
        self, cluster: str, tasks: Sequence[str], region: str
    ) -> Mapping[str, Any]:
        """Return ``DescribeTasks`` for *tasks*, shaped like ``{"tasks": [...]}``."""
        ...
