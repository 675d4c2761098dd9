"""Fleet command dispatcher.

Runs one remote command per server, strictly in file order, and
reports each result as it completes. A failing host is reported and
skipped; it never stops the run or changes the exit status.
"""

import shlex
from dataclasses import dataclass, field
from typing import Iterable, Optional

from shipitctl.core.audit import AuditLogger
from shipitctl.core.context import ExecutionContext
from shipitctl.core.executor import CommandExecutor, build_ssh_command
from shipitctl.services.commands import (
    Operation,
    failure_message,
    progress_message,
    render_remote_command,
)
from shipitctl.services.servers import ServerEntry


@dataclass
class HostResult:
    """Outcome of one server."""
    entry: ServerEntry
    operation: Operation
    return_code: int

    @property
    def success(self) -> bool:
        return self.return_code == 0


@dataclass
class DispatchReport:
    """Outcome of a whole run."""
    operation: Operation
    results: list[HostResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def failures(self) -> list[HostResult]:
        return [r for r in self.results if not r.success]


class FleetDispatcher:
    """Sequential SSH dispatcher over a server list.

    Every call goes to the configured relay host, on the port given by
    the server entry.
    """

    def __init__(
        self,
        ctx: ExecutionContext,
        executor: Optional[CommandExecutor] = None,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.ctx = ctx
        self.executor = executor or CommandExecutor(ctx)
        self.audit = audit

    def dispatch_one(self, operation: Operation, entry: ServerEntry) -> HostResult:
        """Run the operation on a single server and print its result line."""
        config = self.ctx.config
        console = self.ctx.console

        remote_command = render_remote_command(operation, config)

        # Debug output must come before the progress text, which is left open.
        argv = build_ssh_command(
            config.ssh_target, entry.port, remote_command, ssh_binary=config.ssh_binary
        )
        console.debug(f"Running: {shlex.join(argv)}")

        console.progress_start(progress_message(operation, entry.label))

        result = self.executor.ssh(
            config.ssh_target,
            entry.port,
            remote_command,
            ssh_binary=config.ssh_binary,
            timeout=config.ssh_timeout,
        )

        # In dry-run mode the executor ends the line with the would-run command.
        if not self.ctx.dry_run:
            if result.success:
                console.progress_ok()
            else:
                console.progress_failed(failure_message(operation, entry.label))
                console.verbose(f"ssh exited with status {result.return_code}")

        if self.audit is not None:
            self.audit.log_host(
                operation.value,
                entry.hostname,
                entry.port,
                result.return_code,
                dry_run=self.ctx.dry_run,
            )

        return HostResult(entry=entry, operation=operation, return_code=result.return_code)

    def dispatch(self, operation: Operation, entries: Iterable[ServerEntry]) -> DispatchReport:
        """Run the operation on every server in order.

        Args:
            operation: Operation to run
            entries: Servers, in processing order

        Returns:
            Report with one result per server
        """
        report = DispatchReport(operation=operation)
        for entry in entries:
            report.results.append(self.dispatch_one(operation, entry))
        return report
