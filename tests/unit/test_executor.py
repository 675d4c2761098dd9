"""Unit tests for the command executor."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from shipitctl.core.context import ExecutionContext
from shipitctl.core.exceptions import ExecutionError
from shipitctl.core.executor import (
    RETURN_CODE_NOT_FOUND,
    RETURN_CODE_TIMEOUT,
    CommandExecutor,
    build_ssh_command,
)


@pytest.fixture
def ctx() -> ExecutionContext:
    return ExecutionContext()


@pytest.fixture
def dry_ctx() -> ExecutionContext:
    return ExecutionContext(dry_run=True)


class TestBuildSshCommand:
    """Tests for build_ssh_command."""

    def test_argv(self):
        """ssh gets -n, the target, the port and one command string."""
        assert build_ssh_command(
            "root@relay-cn.aosc.io", "2201", "systemctl stop shipit-worker.service"
        ) == [
            "ssh", "-n", "root@relay-cn.aosc.io", "-p", "2201",
            "systemctl stop shipit-worker.service",
        ]

    def test_empty_port_passed_through(self):
        """An empty port still occupies the -p argument."""
        argv = build_ssh_command("root@relay", "", "true")
        assert argv[3:5] == ["-p", ""]

    def test_custom_binary(self):
        assert build_ssh_command("a@b", "22", "true", ssh_binary="/usr/bin/ssh")[0] == "/usr/bin/ssh"


class TestRun:
    """Tests for CommandExecutor.run."""

    @patch("shipitctl.core.executor.subprocess.run")
    def test_stdin_is_detached(self, mock_run, ctx):
        """Child processes never read the caller's stdin."""
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")

        CommandExecutor(ctx).run(["true"])

        assert mock_run.call_args.kwargs["stdin"] is subprocess.DEVNULL

    @patch("shipitctl.core.executor.subprocess.run")
    def test_check_raises_on_failure(self, mock_run, ctx):
        mock_run.return_value = Mock(returncode=3, stdout="", stderr="boom")

        with pytest.raises(ExecutionError) as exc:
            CommandExecutor(ctx).run(["false"])

        assert exc.value.return_code == 3
        assert "Exit code: 3" in exc.value.details

    @patch("shipitctl.core.executor.subprocess.run")
    def test_unchecked_failure_returns_result(self, mock_run, ctx):
        mock_run.return_value = Mock(returncode=255, stdout="", stderr="")

        result = CommandExecutor(ctx).run(["false"], check=False)

        assert result.return_code == 255
        assert not result.success

    @patch("shipitctl.core.executor.subprocess.run")
    def test_unchecked_timeout(self, mock_run, ctx):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["ssh"], timeout=5)

        result = CommandExecutor(ctx).run(["ssh"], check=False, timeout=5)

        assert result.return_code == RETURN_CODE_TIMEOUT

    @patch("shipitctl.core.executor.subprocess.run")
    def test_checked_timeout(self, mock_run, ctx):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["ssh"], timeout=5)

        with pytest.raises(ExecutionError) as exc:
            CommandExecutor(ctx).run(["ssh"], timeout=5)

        assert "timed out" in str(exc.value)

    @patch("shipitctl.core.executor.subprocess.run")
    def test_unchecked_missing_binary(self, mock_run, ctx):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory", "ssh")

        result = CommandExecutor(ctx).run(["ssh"], check=False)

        assert result.return_code == RETURN_CODE_NOT_FOUND

    @patch("shipitctl.core.executor.subprocess.run")
    def test_dry_run_spawns_nothing(self, mock_run, dry_ctx):
        result = CommandExecutor(dry_ctx).run(["ssh", "host", "reboot"])

        mock_run.assert_not_called()
        assert result.success


class TestSsh:
    """Tests for CommandExecutor.ssh."""

    @patch("shipitctl.core.executor.subprocess.run")
    def test_streams_output_unchecked(self, mock_run, ctx):
        """SSH output goes to the terminal and failures are returned."""
        mock_run.return_value = Mock(returncode=255, stdout=None, stderr=None)

        result = CommandExecutor(ctx).ssh("root@relay", "2201", "true", timeout=10)

        args, kwargs = mock_run.call_args
        assert args[0] == ["ssh", "-n", "root@relay", "-p", "2201", "true"]
        assert kwargs["capture_output"] is False
        assert kwargs["timeout"] == 10
        assert result.return_code == 255
        assert result.stdout == ""

    @patch("shipitctl.core.executor.subprocess.run")
    def test_prints_nothing_before_the_call(self, mock_run):
        """ssh runs mid-line, so the executor prints no debug output."""
        mock_run.return_value = Mock(returncode=0, stdout=None, stderr=None)
        ctx = ExecutionContext(verbosity=3, _console=Mock())

        CommandExecutor(ctx).ssh("root@relay", "2201", "true")

        ctx.console.debug.assert_not_called()

    @patch("shipitctl.core.executor.subprocess.run")
    def test_run_announces_by_default(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        ctx = ExecutionContext(verbosity=3, _console=Mock())

        CommandExecutor(ctx).run(["true"])

        ctx.console.debug.assert_called_once_with("Running: true")
