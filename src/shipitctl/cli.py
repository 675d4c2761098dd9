"""Main CLI entry point using Typer.

Usage:
    shipitctl restart
    shipitctl stop --servers staging.list
    shipitctl update-keys --dry-run
"""

from pathlib import Path
from typing import Optional, Annotated

import typer
from rich.console import Console
from rich.markup import escape

from shipitctl import __version__
from shipitctl.core.audit import AuditLogger
from shipitctl.core.context import ExecutionContext, create_context
from shipitctl.core.output import console as app_console
from shipitctl.core.exceptions import ShipitError
from shipitctl.services.commands import Operation
from shipitctl.services.dispatcher import DispatchReport, FleetDispatcher
from shipitctl.services.servers import load_server_list


app = typer.Typer(
    name="shipitctl",
    help="Restart, stop or update keys on every ShipIt worker.",
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)


# Type aliases for options
DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Print the ssh commands instead of running them.",
        is_flag=True,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase output verbosity. Can be repeated (-v, -vv).",
    ),
]

QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Only print per-host results and errors.",
        is_flag=True,
    ),
]

NoColorOption = Annotated[
    bool,
    typer.Option(
        "--no-color",
        help="Disable colored output.",
        is_flag=True,
    ),
]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file. Default: ./shipitctl.yaml if present.",
        exists=False,
        file_okay=True,
        dir_okay=False,
    ),
]

ServersOption = Annotated[
    Optional[Path],
    typer.Option(
        "--servers",
        "-s",
        help="Server list file. Default: ./servers.list",
        exists=False,
        file_okay=True,
        dir_okay=False,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console = Console()
        console.print(f"shipitctl version {__version__}")
        raise typer.Exit()


def handle_error(error: ShipitError) -> None:
    """Handle a ShipitError by printing formatted error and exiting."""
    app_console.error(error.message)

    if error.details:
        for detail in error.details:
            app_console.print(f"  [dim]{escape(detail)}[/dim]")

    if error.hint:
        app_console.hint(error.hint)

    raise typer.Exit(error.exit_code)


def print_summary(ctx: ExecutionContext, report: DispatchReport) -> None:
    """Print the per-run totals and, when verbose, the failed hosts."""
    if ctx.is_quiet:
        return

    ctx.console.info(f"{report.succeeded} succeeded, {report.failed} failed")

    if ctx.is_verbose and report.failures:
        ctx.console.table(
            "Failed hosts",
            ["Line", "Host", "Port", "Exit code"],
            [
                [
                    str(r.entry.line_number),
                    r.entry.hostname,
                    r.entry.port,
                    str(r.return_code),
                ]
                for r in report.failures
            ],
        )


@app.command()
def main(
    operation: Annotated[
        Optional[str],
        typer.Argument(
            help="Operation to run on every server: restart, stop or update-keys.",
            show_default=False,
        ),
    ] = None,
    servers: ServersOption = None,
    config: ConfigOption = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = 0,
    quiet: QuietOption = False,
    no_color: NoColorOption = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Run one operation on every server in the server list.

    Each line of the server list holds a hostname and an SSH port. The
    operation is sent over SSH to the relay host on that port, one
    server at a time. A failing server is reported and skipped; the
    exit status stays 0. An empty server list does nothing, whatever
    the operation.

    [bold]Operations:[/bold]
    - restart: pull the latest ShipIt and restart the worker
    - stop: stop the worker
    - update-keys: reinstall contributor public keys
    """
    ctx = create_context(
        dry_run=dry_run,
        verbose=verbose,
        quiet=quiet,
        no_color=no_color,
        config=config,
        servers=servers,
    )

    try:
        fleet_config = ctx.config
        if ctx.is_debug:
            ctx.console.debug(f"Configuration:\n{fleet_config.to_yaml()}")

        servers_path = ctx.server_list_path
        entries = load_server_list(servers_path)
        ctx.console.verbose(f"Loaded {len(entries)} servers from {servers_path}")

        # The operation is only checked once there is a server to run it on.
        if not entries:
            return
        op = Operation.parse(operation or "")

        audit = AuditLogger(
            log_path=fleet_config.audit_log,
            enabled=fleet_config.audit_enabled,
        )
        audit.log_session_start(op.value, servers_path)

        report = FleetDispatcher(ctx, audit=audit).dispatch(op, entries)

        audit.log_session_end(op.value, report.succeeded, report.failed)

    except ShipitError as e:
        handle_error(e)
        return

    print_summary(ctx, report)


if __name__ == "__main__":
    app()
