"""Removes the local node from discovered addresses.

Limitation: exclusion works on addresses, so several differently named
members inside a single task cannot be told apart.
"""

from __future__ import annotations

import abc
import ipaddress
from collections.abc import Iterable

from ..models import AddressMode

_HOSTNAME_IP_PREFIX = "ip-"


def member_identifier(name_prefix: str, address: str) -> str:
    """Build the canonical ``prefix@address`` member name."""
    return f"{name_prefix}@{address}"


def private_ip_from_hostname(hostname: str | None) -> str | None:
    """Derive ``10.0.1.2`` from a default ECS/EC2 host name like ``ip-10-0-1-2``.

    Only the first label is considered, so ``ip-10-0-1-2.ec2.internal``
    also works.  Returns ``None`` for any other host name.
    """
    if not hostname:
        return None
    label = hostname.split(".", 1)[0]
    if not label.startswith(_HOSTNAME_IP_PREFIX):
        return None
    candidate = label[len(_HOSTNAME_IP_PREFIX):].replace("-", ".")
    try:
        return str(ipaddress.IPv4Address(candidate))
    except ValueError:
        return None


class SelfExclusion(abc.ABC):
    """Strategy that drops the local node's address from a discovered list."""

    @abc.abstractmethod
    def apply(self, addresses: Iterable[str]) -> list[str]:
        ...


class HostnameSelfExclusion(SelfExclusion):
    """Drops addresses equal to the private IP encoded in the local host name."""

    def __init__(self, hostname: str | None) -> None:
        self._self_ip = private_ip_from_hostname(hostname)

    @property
    def self_address(self) -> str | None:
        return self._self_ip

    def apply(self, addresses: Iterable[str]) -> list[str]:
        if self._self_ip is None:
            return list(addresses)
        return [a for a in addresses if a != self._self_ip]


class IdentitySelfExclusion(SelfExclusion):
    """Drops the address whose member identifier equals the local identity."""

    def __init__(self, local_identity: str | None, name_prefix: str) -> None:
        self._local_identity = local_identity or None
        self._name_prefix = name_prefix

    def apply(self, addresses: Iterable[str]) -> list[str]:
        if self._local_identity is None:
            return list(addresses)
        return [
            a for a in addresses
            if member_identifier(self._name_prefix, a) != self._local_identity
        ]


def self_exclusion_for(
    mode: AddressMode,
    name_prefix: str,
    local_identity: str | None = None,
    hostname: str | None = None,
) -> SelfExclusion:
    """Build the single active strategy for a resolved address *mode*.

    The registered identity is used whenever the host reports one. In
    ``IPV4`` mode without an identity the private IP is derived from the
    host name instead; ``DNS`` names cannot be derived that way.
    """
    if mode == AddressMode.AUTO:
        raise ValueError("Address mode must be resolved before self-exclusion")
    if local_identity or mode == AddressMode.DNS:
        return IdentitySelfExclusion(local_identity, name_prefix)
    return HostnameSelfExclusion(hostname)
