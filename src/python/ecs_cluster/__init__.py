"""ECS cluster discovery library.

Discovers the members of a process cluster from the running tasks of
one or more AWS ECS services and keeps a host's membership in sync with
them through a pluggable :class:`MembershipManager`.

Quick Start::

    from ecs_cluster import (
        Boto3DirectoryService,
        MembershipManager,
        MembershipOutcome,
        MembershipReconciler,
    )

    class PeerLinks(MembershipManager):
        def connect(self, members):
            # open links to "app@10.0.1.2", ...
            return MembershipOutcome.ok()

        def disconnect(self, members):
            return MembershipOutcome.ok()

    reconciler = MembershipReconciler(
        config={
            "cluster": "prod",
            "service_names": ["web-.*"],
            "region": "eu-west-1",
        },
        directory=Boto3DirectoryService(),
        membership_manager=PeerLinks(),
    )
    reconciler.start()
    ...
    reconciler.stop()
"""

from .cluster.membership_manager import LoggingMembershipManager, MembershipManager
from .cluster.membership_reconciler import MembershipReconciler
from .config import DiscoveryConfig, load_config, require_config_keys, validate_config
from .directory.boto3_directory_service import Boto3DirectoryService
from .directory.directory_client import DirectoryClient
from .directory.directory_service import DirectoryService
from .discovery.node_discovery import get_candidate_members
from .discovery.self_exclusion import member_identifier
from .exceptions import (
    ConfigError,
    ConfigValidationError,
    DirectoryError,
    DiscoveryError,
    EcsClusterError,
    ExtractionError,
    PatternError,
    ResolutionError,
)
from .models import (
    AddressMode,
    DiscoveryResult,
    DiscoveryStatus,
    MembershipOutcome,
    ReconcileReport,
    ReconcilerState,
)

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "MembershipReconciler",
    "get_candidate_members",
    # Membership
    "LoggingMembershipManager",
    "MembershipManager",
    "member_identifier",
    # Directory
    "Boto3DirectoryService",
    "DirectoryClient",
    "DirectoryService",
    # Config
    "DiscoveryConfig",
    "load_config",
    "require_config_keys",
    "validate_config",
    # Models
    "AddressMode",
    "DiscoveryResult",
    "DiscoveryStatus",
    "MembershipOutcome",
    "ReconcileReport",
    "ReconcilerState",
    # Exceptions
    "ConfigError",
    "ConfigValidationError",
    "DirectoryError",
    "DiscoveryError",
    "EcsClusterError",
    "ExtractionError",
    "PatternError",
    "ResolutionError",
]
