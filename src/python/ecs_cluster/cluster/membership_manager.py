"""Abstract base class for the host's membership side effects.

Consumers of this library implement this interface to actually connect
to and disconnect from cluster members (e.g. open/close peer links).
The reconciler only interprets the reported outcome.
"""

from __future__ import annotations

import abc
import logging
import threading

from ..models import MembershipOutcome


class MembershipManager(abc.ABC):
    """Applies membership changes decided by the reconciler."""

    @abc.abstractmethod
    def connect(self, members: list[str]) -> MembershipOutcome:
        """Connect to *members*.

        Connecting to an already connected member must be a no-op.

        Returns:
            :meth:`MembershipOutcome.ok` on full success, otherwise a
            partial failure listing ``(member, reason)`` pairs that are
            *not* connected.
        """
        ...

    @abc.abstractmethod
    def disconnect(self, members: list[str]) -> MembershipOutcome:
        """Disconnect from *members*.

        Returns:
            :meth:`MembershipOutcome.ok` on full success, otherwise a
            partial failure listing ``(member, reason)`` pairs that are
            *still* connected.
        """
        ...

    def self_identity(self) -> str | None:
        """Return this node's own registered member identifier, if known."""
        return None


class LoggingMembershipManager(MembershipManager):
    """Dry-run manager that only logs and records membership changes.

    Every call succeeds.  Useful for observing discovery from the CLI.

    Args:
        identity: Optional identity reported by :meth:`self_identity`.
    """

    def __init__(self, identity: str | None = None) -> None:
        self._identity = identity
        self._lock = threading.Lock()
        self._connected: set[str] = set()
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def connected(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._connected)

    def connect(self, members: list[str]) -> MembershipOutcome:
        with self._lock:
            self._connected.update(members)
        for member in members:
            self._logger.info("connect %s", member)
        return MembershipOutcome.ok()

    def disconnect(self, members: list[str]) -> MembershipOutcome:
        with self._lock:
            self._connected.difference_update(members)
        for member in members:
            self._logger.info("disconnect %s", member)
        return MembershipOutcome.ok()

    def self_identity(self) -> str | None:
        return self._identity
