from .membership_manager import LoggingMembershipManager, MembershipManager
from .membership_reconciler import MembershipReconciler

__all__ = [
    "LoggingMembershipManager",
    "MembershipManager",
    "MembershipReconciler",
]
