from .address_extractor import detect_address_mode, extract_addresses
from .node_discovery import get_candidate_members
from .self_exclusion import (
    HostnameSelfExclusion,
    IdentitySelfExclusion,
    member_identifier,
    private_ip_from_hostname,
    self_exclusion_for,
)
from .service_resolver import resolve_service
from .task_collector import collect_task_arns

__all__ = [
    "HostnameSelfExclusion",
    "IdentitySelfExclusion",
    "collect_task_arns",
    "detect_address_mode",
    "extract_addresses",
    "get_candidate_members",
    "member_identifier",
    "private_ip_from_hostname",
    "resolve_service",
    "self_exclusion_for",
]
