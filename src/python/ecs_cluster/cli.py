"""Typer-based CLI for inspecting ECS cluster discovery."""

from __future__ import annotations

import logging
import socket
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from ecs_cluster import __version__
from ecs_cluster.cluster.membership_manager import LoggingMembershipManager
from ecs_cluster.cluster.membership_reconciler import MembershipReconciler
from ecs_cluster.config import DEFAULT_REQUEST_TIMEOUT_S, load_config
from ecs_cluster.directory.boto3_directory_service import Boto3DirectoryService
from ecs_cluster.discovery.node_discovery import get_candidate_members
from ecs_cluster.exceptions import ConfigError

app = typer.Typer(help="ECS cluster discovery CLI", no_args_is_help=True, pretty_exceptions_enable=False)

ConfigOption = typer.Option(None, "--config", "-c", help="YAML file with an 'ecs_cluster' section.")
ClusterOption = typer.Option(None, "--cluster", help="ECS cluster name or ARN.")
ServiceOption = typer.Option(None, "--service", "-s", help="Service name or regex (repeatable).")
RegionOption = typer.Option(None, "--region", help="AWS region.")
PrefixOption = typer.Option(None, "--prefix", help="Member name prefix (default 'app').")
ModeOption = typer.Option(None, "--address-mode", help="ipv4, dns or auto.")
IdentityOption = typer.Option(None, "--identity", help="This node's own member identifier.")
LogLevelOption = typer.Option("INFO", "--log-level", help="Logging level.")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s %(levelname)s: [%(name)s] %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%SZ',
        handlers=[logging.StreamHandler()],
        force=True,
    )


def _build_config(
    config_path: Optional[Path],
    cluster: Optional[str],
    services: Optional[List[str]],
    region: Optional[str],
    prefix: Optional[str],
    address_mode: Optional[str],
) -> Dict[str, Any]:
    config: Dict[str, Any] = load_config(config_path) if config_path else {}
    overrides = {
        "cluster": cluster,
        "service_names": services or None,
        "region": region,
        "name_prefix": prefix,
        "address_mode": address_mode,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})
    return config


def _build_directory(config: Dict[str, Any]) -> Boto3DirectoryService:
    timeout = config.get("request_timeout_s")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        # Invalid values are reported by validation on the first poll
        timeout = DEFAULT_REQUEST_TIMEOUT_S
    return Boto3DirectoryService(request_timeout=float(timeout))


def _local_hostname() -> Optional[str]:
    try:
        return socket.gethostname()
    except OSError:
        return None


def _wait_for_interrupt() -> None:
    threading.Event().wait()


@app.command()
def version() -> None:
    """Print the library version."""
    typer.echo(__version__)


@app.command()
def discover(
    config_path: Optional[Path] = ConfigOption,
    cluster: Optional[str] = ClusterOption,
    service: Optional[List[str]] = ServiceOption,
    region: Optional[str] = RegionOption,
    prefix: Optional[str] = PrefixOption,
    address_mode: Optional[str] = ModeOption,
    identity: Optional[str] = IdentityOption,
    log_level: str = LogLevelOption,
) -> None:
    """Run a single discovery poll and print the member identifiers."""
    configure_logging(log_level)
    config = _build_config(config_path, cluster, service, region, prefix, address_mode)
    try:
        result = get_candidate_members(
            config,
            _build_directory(config),
            local_identity=identity,
            hostname=_local_hostname(),
        )
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    if not result.is_success:
        typer.echo(f"Discovery failed: {result.error}", err=True)
        raise typer.Exit(code=1)
    for member in sorted(result.members):
        typer.echo(member)


@app.command()
def watch(
    config_path: Optional[Path] = ConfigOption,
    cluster: Optional[str] = ClusterOption,
    service: Optional[List[str]] = ServiceOption,
    region: Optional[str] = RegionOption,
    prefix: Optional[str] = PrefixOption,
    address_mode: Optional[str] = ModeOption,
    identity: Optional[str] = IdentityOption,
    log_level: str = LogLevelOption,
) -> None:
    """Poll continuously and log membership changes (dry run, no connections)."""
    configure_logging(log_level)
    config = _build_config(config_path, cluster, service, region, prefix, address_mode)
    try:
        reconciler = MembershipReconciler(
            config,
            _build_directory(config),
            LoggingMembershipManager(identity=identity),
        )
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    reconciler.start()
    try:
        _wait_for_interrupt()
    except KeyboardInterrupt:
        pass
    finally:
        reconciler.stop()
    typer.echo(f"Known members at exit: {len(reconciler.known_members)}")


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
