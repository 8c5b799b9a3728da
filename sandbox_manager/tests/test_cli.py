"""Tests for sandbox-manager CLI commands."""

import asyncio
import json

import pytest
from click.testing import CliRunner

from sandbox_manager.cli import cli
from sandbox_manager.commands.serve import run_prune_loop
from sandbox_manager.common.exceptions import ConfigError

HOUR_MS = 60 * 60 * 1000
DEFAULT_IMAGE = "sandbox-agent:bookworm-slim"


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture
def manager(mocker, sandbox_manager):
    """Inject the fake-backed manager into the CLI."""
    mocker.patch("sandbox_manager.cli.build_sandbox_manager", return_value=sandbox_manager)
    return sandbox_manager


@pytest.fixture
def three_containers(fake_registry, fake_runtime, make_entry):
    for name, session_key in [
        ("c1", "agent:main:default"),
        ("c2", "agent:coder:main"),
        ("c3", "agent:coder:review"),
    ]:
        fake_registry.upsert(make_entry(name, session_key=session_key))
        fake_runtime.containers[name] = {"image": DEFAULT_IMAGE, "running": True}
    return fake_registry


class TestCLI:
    """Tests for global CLI behavior."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "recreate" in result.output
        assert "prune" in result.output

    def test_invalid_config_exits(self, runner, mocker):
        mocker.patch(
            "sandbox_manager.cli.build_sandbox_manager",
            side_effect=ConfigError("'agents.list' must be a list"),
        )

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 1
        assert "'agents.list' must be a list" in result.output

    def test_invalid_prune_value_in_config_file_exits(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "sandbox:\n  docker:\n    image: img:1\n  prune:\n    idleHours: -1\n",
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["--config", str(config_file), "list"])

        assert result.exit_code == 1
        assert "Error: 'prune.idleHours' must be a non-negative integer" in result.output

    def test_invalid_runtime_config_exits(self, runner, tmp_path, mocker):
        mocker.patch("sandbox_manager.config.config.SANDBOX_RUNTIME_CONFIG", "{not json")

        result = runner.invoke(
            cli, ["--config", str(tmp_path / "missing.yaml"), "list"]
        )

        assert result.exit_code == 1
        assert "Error: Invalid JSON in SANDBOX_RUNTIME_CONFIG" in result.output


class TestListCommand:
    """Tests for the list command."""

    def test_list_empty(self, runner, manager):
        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "No containers found." in result.output
        assert "Total: 0" in result.output

    def test_list_table(self, runner, manager, three_containers, fake_runtime):
        fake_runtime.containers["c3"]["running"] = False

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "NAME" in result.output
        assert "c2" in result.output
        assert "Total: 3 (running: 2, stopped: 1)" in result.output
        assert "image mismatch" in result.output

    def test_list_json(self, runner, manager, three_containers):
        result = runner.invoke(cli, ["list", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        names = [c["containerName"] for c in data["containers"]]
        assert names == ["c1", "c2", "c3"]
        assert data["containers"][0]["imageMatch"] is True
        assert data["containers"][1]["imageMatch"] is False

    def test_list_survives_registry_outage(self, runner, manager, fake_registry):
        fake_registry.fail_reads = True

        result = runner.invoke(cli, ["list", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"containers": []}


class TestRecreateCommand:
    """Tests for the recreate command."""

    def test_requires_selector(self, runner, manager, fake_runtime):
        result = runner.invoke(cli, ["recreate"])

        assert result.exit_code == 2
        assert "--all, --session <key>, or --agent <id>" in result.output

    def test_conflicting_selectors_remove_nothing(
        self, runner, manager, three_containers, fake_runtime
    ):
        result = runner.invoke(cli, ["recreate", "--all", "--agent", "coder"])

        assert result.exit_code == 2
        assert "only one of" in result.output
        assert not [c for c in fake_runtime.calls if c[0] == "remove"]

    def test_no_matches(self, runner, manager, three_containers):
        result = runner.invoke(cli, ["recreate", "--agent", "nobody", "--force"])

        assert result.exit_code == 0
        assert "No containers found matching the criteria." in result.output

    def test_declined_confirmation(self, runner, manager, three_containers, fake_runtime):
        result = runner.invoke(cli, ["recreate", "--all"], input="n\n")

        assert result.exit_code == 0
        assert "About to remove 3 container(s)" in result.output
        assert "Cancelled." in result.output
        assert "c1" in fake_runtime.containers

    def test_confirmed_recreate_by_agent(
        self, runner, manager, three_containers, fake_runtime
    ):
        result = runner.invoke(cli, ["recreate", "--agent", "coder"], input="y\n")

        assert result.exit_code == 0
        assert "Removed c2" in result.output
        assert "Removed c3" in result.output
        assert list(fake_runtime.containers) == ["c1"]
        assert [e.container_name for e in three_containers.read()] == ["c1"]

    def test_recreate_by_session(self, runner, manager, three_containers, fake_runtime):
        result = runner.invoke(
            cli, ["recreate", "--session", "agent:coder:main", "--force"]
        )

        assert result.exit_code == 0
        assert "Done: 1 removed, 0 failed" in result.output
        assert "c3" in fake_runtime.containers

    def test_partial_failure_exits_nonzero(
        self, runner, manager, three_containers, fake_runtime
    ):
        fake_runtime.remove_failures.add("c2")

        result = runner.invoke(cli, ["recreate", "--all", "--force"])

        assert result.exit_code == 1
        assert "Failed to remove c2" in result.output
        assert "Done: 2 removed, 1 failed" in result.output
        assert three_containers.get("c2") is not None


class TestPruneCommand:
    """Tests for the prune command."""

    @pytest.fixture
    def stale(self, fake_registry, make_entry, base_time_ms):
        fake_registry.upsert(
            make_entry("old", last_used_at_ms=base_time_ms - 25 * HOUR_MS)
        )
        fake_registry.upsert(make_entry("fresh", last_used_at_ms=base_time_ms))
        return fake_registry

    def test_dry_run_lists_without_removing(self, runner, manager, stale, fake_runtime):
        result = runner.invoke(cli, ["prune", "--dry-run"])

        assert result.exit_code == 0
        assert "old" in result.output
        assert "fresh" not in result.output
        assert not fake_runtime.calls

    def test_prune(self, runner, manager, stale):
        result = runner.invoke(cli, ["prune"])

        assert result.exit_code == 0
        assert "Pruned old" in result.output
        assert "Pruned 1 container(s)." in result.output
        assert stale.get("fresh") is not None

    def test_prune_registry_outage_exits_nonzero(self, runner, manager, fake_registry):
        fake_registry.fail_reads = True

        result = runner.invoke(cli, ["prune"])

        assert result.exit_code == 1
        assert "registry offline" in result.output

    def test_prune_disabled(self, runner, manager, mocker, fake_registry):
        from sandbox_manager.config.sandbox_config import SandboxPruneSettings

        mocker.patch.object(
            manager.config_resolver,
            "resolve_prune_thresholds",
            return_value=SandboxPruneSettings(idle_hours=0, max_age_days=0),
        )

        result = runner.invoke(cli, ["prune"])

        assert result.exit_code == 0
        assert "Pruning is disabled" in result.output
        assert fake_registry.read_calls == 0


class TestEnsureRunningCommand:
    """Tests for the ensure-running command."""

    def test_starts_stopped_container(self, runner, manager, fake_runtime):
        fake_runtime.containers["c1"] = {"image": DEFAULT_IMAGE, "running": False}

        result = runner.invoke(cli, ["ensure-running", "c1"])

        assert result.exit_code == 0
        assert "Started c1" in result.output

    def test_nothing_to_do(self, runner, manager):
        result = runner.invoke(cli, ["ensure-running", "missing"])

        assert result.exit_code == 0
        assert "Nothing to do" in result.output

    def test_start_failure(self, runner, manager, fake_runtime):
        fake_runtime.containers["c1"] = {"image": DEFAULT_IMAGE, "running": False}
        fake_runtime.start_failures.add("c1")

        result = runner.invoke(cli, ["ensure-running", "c1"])

        assert result.exit_code == 1
        assert "cannot start" in result.output

    def test_unknown_state_is_reported(self, runner, manager, fake_runtime):
        fake_runtime.state_failures.add("c1")

        result = runner.invoke(cli, ["ensure-running", "c1"])

        assert result.exit_code == 1
        assert "Cannot determine state of c1: daemon unavailable" in result.output
        assert "Nothing to do" not in result.output


class TestServeCommand:
    """Tests for the serve command."""

    def test_serve_runs_prune_loop(self, runner, manager, mocker):
        loop = mocker.patch(
            "sandbox_manager.commands.serve.run_prune_loop", new=mocker.AsyncMock()
        )

        result = runner.invoke(cli, ["serve"])

        assert result.exit_code == 0
        loop.assert_awaited_once_with(manager)

    @pytest.mark.asyncio
    async def test_prune_loop_stops_scheduler_on_cancel(
        self, sandbox_manager, fake_registry, mocker
    ):
        start = mocker.patch.object(sandbox_manager, "start_scheduler")
        stop = mocker.patch.object(sandbox_manager, "stop_scheduler")

        task = asyncio.create_task(run_prune_loop(sandbox_manager))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        start.assert_awaited_once()
        stop.assert_awaited_once()
        assert fake_registry.read_calls == 1
