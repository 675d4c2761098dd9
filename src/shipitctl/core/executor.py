"""Command execution with dry-run support.

Provides:
- Safe command execution, captured or streamed to the terminal
- Standard input detached from the child process
- Dry-run mode support
"""

import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

from shipitctl.core.context import ExecutionContext
from shipitctl.core.exceptions import ExecutionError


# Shell conventions for failures that never reach the remote side
RETURN_CODE_TIMEOUT = 124
RETURN_CODE_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Result of a command execution."""
    command: list[str]
    return_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Check if command succeeded."""
        return self.return_code == 0


class CommandExecutor:
    """Command execution with dry-run support and optional capture.

    Child processes never inherit the caller's standard input.
    """

    def __init__(self, ctx: ExecutionContext) -> None:
        """Initialize executor with context.

        Args:
            ctx: Execution context with flags
        """
        self.ctx = ctx

    def run(
        self,
        command: list[str],
        *,
        description: Optional[str] = None,
        check: bool = True,
        capture: bool = True,
        timeout: Optional[float] = None,
        announce: bool = True,
    ) -> CommandResult:
        """Execute a command.

        Args:
            command: Command as list of strings
            description: Human-readable description for logging
            check: Raise exception on non-zero exit
            capture: Capture stdout/stderr instead of streaming them
            timeout: Command timeout in seconds
            announce: Print debug lines for the command; callers that
                already printed it, mid-line, pass False

        Returns:
            CommandResult with output. With ``check=False`` a timeout
            or a missing executable is reported as a result with
            return code 124 or 127 instead of raising.

        Raises:
            ExecutionError: If command fails and check=True
        """
        if description:
            self.ctx.console.verbose(description)

        cmd_display = shlex.join(command)
        if announce:
            self.ctx.console.debug(f"Running: {cmd_display}")

        if self.ctx.dry_run:
            self.ctx.console.dry_run_msg(f"Run: {cmd_display}")
            return CommandResult(
                command=command,
                return_code=0,
                stdout="",
                stderr="",
            )

        try:
            result = subprocess.run(
                command,
                stdin=subprocess.DEVNULL,
                capture_output=capture,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            if check:
                raise ExecutionError(
                    f"Command timed out after {timeout}s: {description or cmd_display}",
                    command=cmd_display,
                )
            if announce:
                self.ctx.console.debug(f"Timed out after {timeout}s: {cmd_display}")
            return CommandResult(
                command=command,
                return_code=RETURN_CODE_TIMEOUT,
                stdout="",
                stderr=f"timed out after {timeout}s",
            )
        except FileNotFoundError as e:
            if check:
                raise ExecutionError(
                    f"Command not found: {command[0]}",
                    command=cmd_display,
                    hint="Check that it is installed and on PATH",
                ) from e
            if announce:
                self.ctx.console.debug(f"Command not found: {command[0]}")
            return CommandResult(
                command=command,
                return_code=RETURN_CODE_NOT_FOUND,
                stdout="",
                stderr=str(e),
            )

        cmd_result = CommandResult(
            command=command,
            return_code=result.returncode,
            stdout=result.stdout if capture else "",
            stderr=result.stderr if capture else "",
        )

        if check and result.returncode != 0:
            raise ExecutionError(
                f"Command failed: {description or cmd_display}",
                command=cmd_display,
                return_code=result.returncode,
                stderr=result.stderr if capture else None,
            )

        return cmd_result

    def ssh(
        self,
        target: str,
        port: str,
        remote_command: str,
        *,
        ssh_binary: str = "ssh",
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run one remote command over SSH, unchecked.

        ``-n`` keeps ssh off standard input. The port is passed through
        as given; ssh itself rejects an empty or garbled one. Nothing is
        printed before the call, so a progress line stays on one line;
        callers print the argv themselves.

        Args:
            target: ``user@host`` destination
            port: SSH port, as read from the server list
            remote_command: Shell command line run on the remote side
            ssh_binary: ssh client executable
            timeout: Optional timeout in seconds

        Returns:
            CommandResult; output is streamed to the terminal
        """
        return self.run(
            build_ssh_command(target, port, remote_command, ssh_binary=ssh_binary),
            check=False,
            capture=False,
            timeout=timeout,
            announce=False,
        )


def build_ssh_command(
    target: str,
    port: str,
    remote_command: str,
    *,
    ssh_binary: str = "ssh",
) -> list[str]:
    """Build the ssh argv for a single remote command."""
    return [ssh_binary, "-n", target, "-p", port, remote_command]
