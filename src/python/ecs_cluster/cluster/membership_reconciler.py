"""Membership reconciler: the periodic discovery control loop.

Each cycle polls ECS via :func:`get_candidate_members`, diffs the
result against the known membership, applies the delta through the
:class:`MembershipManager` and folds the reported outcome back in:

1. ``removed = known - new`` and ``added = new - known``.
2. ``disconnect(removed)``: members that could not be disconnected are
   added back, since they are still connected.
3. ``connect(added)``: members that could not be connected are dropped,
   since they are not connected.
4. The result becomes the new known membership.

An ``auto`` address mode is pinned once it resolves to ``dns``.  A failed
poll never touches the known membership.  The loop re-arms its
timer only after a cycle finishes, so polls never overlap.
"""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Mapping
from time import time
from typing import Any, Callable

from prometheus_client import Counter, Gauge, Histogram

from ..config import DEFAULT_POLL_INTERVAL_MS, require_config_keys, validate_config
from ..directory.directory_client import DirectoryClient
from ..directory.directory_service import DirectoryService
from ..discovery.node_discovery import get_candidate_members
from ..exceptions import EcsClusterError
from ..models import AddressMode, MembershipOutcome, ReconcilerState, ReconcileReport
from .membership_manager import MembershipManager

logger = logging.getLogger(__name__)

RECONCILE_CYCLE_COUNTER = Counter(
    "ecs_cluster_reconcile_cycles_total",
    "Total number of poll-and-reconcile cycles",
    ["reconciler", "outcome"],
)
RECONCILE_DURATION_HISTOGRAM = Histogram(
    "ecs_cluster_reconcile_duration_seconds",
    "Duration of poll-and-reconcile cycles in seconds",
    ["reconciler"],
)
KNOWN_MEMBERS_GAUGE = Gauge(
    "ecs_cluster_known_members",
    "Number of members currently tracked as connected",
    ["reconciler"],
)


class MembershipReconciler:
    """Keeps the host's cluster membership in line with ECS.

    Parameters:
        config: Raw discovery configuration, re-read on every poll.
        directory: Directory service used for discovery.
        membership_manager: Applies connect/disconnect side effects.
        name: Topology name used in log messages and the thread name.
        hostname_resolver: Returns the local host name (used to derive
            the local private IP for self-exclusion).

    Raises:
        ConfigError: A structurally required configuration key is missing.
    """

    def __init__(
        self,
        config: Mapping[str, Any],
        directory: DirectoryService | DirectoryClient,
        membership_manager: MembershipManager,
        name: str = "ecs",
        hostname_resolver: Callable[[], str | None] = socket.gethostname,
    ) -> None:
        require_config_keys(config)
        self._config = config
        self._client = directory if isinstance(directory, DirectoryClient) else DirectoryClient(directory)
        self._manager = membership_manager
        self._name = name
        self._hostname_resolver = hostname_resolver

        self._known: frozenset[str] = frozenset()
        self._known_lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._state = ReconcilerState.IDLE
        self._last_report: ReconcileReport | None = None
        self._pinned_mode: AddressMode | None = None

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ── Properties ────────────────────────────────────────────────

    @property
    def known_members(self) -> frozenset[str]:
        """The authoritative, reconciled membership set."""
        with self._known_lock:
            return self._known

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def last_report(self) -> ReconcileReport | None:
        return self._last_report

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def poll_interval(self) -> float:
        """Seconds to wait between polls, from the current configuration."""
        try:
            return validate_config(self._config).poll_interval
        except EcsClusterError:
            return DEFAULT_POLL_INTERVAL_MS / 1000.0

    # ── Lifecycle ─────────────────────────────────────────────────

    def start(self) -> None:
        """Start the background loop; the first poll runs immediately."""
        if self.is_running:
            return
        # One stop event per run; a stale loop keeps its own set event
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._stop_event,),
            name=f"membership-{self._name}",
            daemon=True,
        )
        self._thread.start()
        logger.info("[%s] membership reconciler started", self._name)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the background loop and wait for the current cycle to end.

        If the cycle outlasts *timeout* the old loop still exits once it
        finishes, since its stop event stays set.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(
                    "[%s] membership reconciler still finishing a cycle after %.1fs",
                    self._name,
                    timeout,
                )
            self._thread = None
            logger.info("[%s] membership reconciler stopped", self._name)

    def __enter__(self) -> MembershipReconciler:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.stop()

    # ── Cycle ─────────────────────────────────────────────────────

    def poll_once(self) -> ReconcileReport:
        """Run a single poll-and-reconcile cycle and return its report."""
        with self._cycle_lock:
            start_time = time()
            try:
                self._state = ReconcilerState.POLLING
                result = get_candidate_members(
                    self._config,
                    self._client,
                    local_identity=self._self_identity(),
                    hostname=self._hostname(),
                    pinned_mode=self._pinned_mode,
                )
                if not result.is_success:
                    report = ReconcileReport(
                        members=self.known_members, poll_error=str(result.error)
                    )
                else:
                    if result.address_mode == AddressMode.DNS:
                        # Host names stay the member format once seen
                        self._pinned_mode = AddressMode.DNS
                    self._state = ReconcilerState.RECONCILING
                    report = self._reconcile(result.members)
            finally:
                self._state = ReconcilerState.IDLE
                RECONCILE_DURATION_HISTOGRAM.labels(reconciler=self._name).observe(time() - start_time)
            RECONCILE_CYCLE_COUNTER.labels(
                reconciler=self._name, outcome="ok" if report.is_success else "error"
            ).inc()
            KNOWN_MEMBERS_GAUGE.labels(reconciler=self._name).set(len(report.members))
            self._last_report = report
            return report

    def _reconcile(self, new_members: frozenset[str]) -> ReconcileReport:
        known = self.known_members
        removed = known - new_members
        added = new_members - known
        working = set(new_members)

        failed_disconnect: set[str] = set()
        if removed:
            outcome = self._apply("disconnect", self._manager.disconnect, removed)
            failed_disconnect = outcome.failed_members
            # Still connected, keep tracking them
            working |= failed_disconnect

        failed_connect: set[str] = set()
        if added:
            outcome = self._apply("connect", self._manager.connect, added)
            failed_connect = outcome.failed_members
            # Never connected, stop tracking them
            working -= failed_connect

        members = frozenset(working)
        with self._known_lock:
            self._known = members

        if added or removed:
            logger.info(
                "[%s] membership reconciled: %d added, %d removed, %d total",
                self._name,
                len(added) - len(failed_connect & added),
                len(removed) - len(failed_disconnect & removed),
                len(members),
            )
        return ReconcileReport(
            added=frozenset(added),
            removed=frozenset(removed),
            failed_connect=frozenset(failed_connect),
            failed_disconnect=frozenset(failed_disconnect),
            members=members,
        )

    def _apply(
        self,
        action: str,
        fn: Callable[[list[str]], MembershipOutcome],
        members: set[str],
    ) -> MembershipOutcome:
        """Invoke a manager call; an exception counts as nothing applied."""
        targets = sorted(members)
        try:
            outcome = fn(targets)
        except Exception as e:
            logger.exception("[%s] %s raised for %d member(s)", self._name, action, len(targets))
            return MembershipOutcome.partial_failure([(m, repr(e)) for m in targets])
        for member, reason in outcome.failed:
            logger.warning("[%s] unable to %s %s: %s", self._name, action, member, reason)
        return outcome

    # ── Background loop ───────────────────────────────────────────

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("[%s] membership poll error", self._name)
            stop_event.wait(self.poll_interval)

    # ── Self identity ─────────────────────────────────────────────

    def _self_identity(self) -> str | None:
        try:
            return self._manager.self_identity()
        except Exception:
            logger.warning("[%s] unable to read own identity", self._name, exc_info=True)
            return None

    def _hostname(self) -> str | None:
        try:
            return self._hostname_resolver()
        except OSError:
            return None
