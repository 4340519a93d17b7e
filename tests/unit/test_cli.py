"""Sanity tests for the CLI."""

import yaml
from typer.testing import CliRunner

from conftest import FakeDirectoryService

from ecs_cluster import cli
from ecs_cluster.cli import app

runner = CliRunner()


def _use_directory(monkeypatch, directory):
    monkeypatch.setattr(cli, "_build_directory", lambda config: directory)
    monkeypatch.setattr(cli, "_local_hostname", lambda: "laptop")
    monkeypatch.setattr(cli, "configure_logging", lambda level="INFO": None)


def test_help_command():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "ECS cluster discovery CLI" in result.stdout


def test_version_command():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == cli.__version__


def test_discover_prints_sorted_members(monkeypatch, directory):
    _use_directory(monkeypatch, directory)
    result = runner.invoke(
        app,
        ["discover", "--cluster", "prod", "--service", "svc-1", "--region", "eu-west-1"],
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["app@10.0.0.5", "app@10.0.0.6"]


def test_discover_reads_config_file_and_applies_overrides(monkeypatch, directory, tmp_path):
    _use_directory(monkeypatch, directory)
    config_path = tmp_path / "ecs.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {"ecs_cluster": {"cluster": "prod", "service_names": ["svc-2"], "region": "eu-west-1"}}
        )
    )
    result = runner.invoke(
        app,
        ["discover", "--config", str(config_path), "--prefix", "node", "--identity", "node@10.0.0.6"],
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["node@10.0.1.9"]

    result = runner.invoke(
        app,
        ["discover", "--config", str(config_path), "-s", "svc-1", "--identity", "app@10.0.0.6"],
    )
    assert result.stdout.splitlines() == ["app@10.0.0.5"]


def test_discover_failure_exits_non_zero(monkeypatch, directory):
    _use_directory(monkeypatch, directory)
    result = runner.invoke(
        app,
        ["discover", "--cluster", "prod", "--service", "missing", "--region", "eu-west-1"],
    )
    assert result.exit_code == 1


def test_discover_missing_key_is_configuration_error(monkeypatch):
    _use_directory(monkeypatch, FakeDirectoryService())
    result = runner.invoke(app, ["discover", "--cluster", "prod", "--region", "eu-west-1"])
    assert result.exit_code == 2


def test_watch_runs_reconciler_until_interrupted(monkeypatch, directory):
    _use_directory(monkeypatch, directory)

    def fake_wait():
        for _ in range(500):
            if directory.call_names().count("describe_tasks") >= 1:
                break
            cli.threading.Event().wait(0.01)
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "_wait_for_interrupt", fake_wait)
    result = runner.invoke(
        app,
        ["watch", "--cluster", "prod", "--service", "svc-1", "--region", "eu-west-1"],
    )
    assert result.exit_code == 0, result.output
    assert "describe_tasks" in directory.call_names()
