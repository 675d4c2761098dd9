"""Execution context for commands.

The ExecutionContext holds the current state and flags that affect
how a dispatch run is executed. It is passed to the executor and the
dispatcher, and carries the loaded configuration and console.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from shipitctl.core.config import FleetConfig, load_config
from shipitctl.core.output import Console, console, Verbosity


@dataclass
class ExecutionContext:
    """Execution context passed to the executor and dispatcher.

    Attributes:
        dry_run: If True, show what would happen without executing
        verbosity: Output verbosity level (0-3)
        no_color: If True, disable colored output
        config_path: Explicit configuration file, None for the default
        servers_file: Server list override from the command line
    """

    # Runtime flags
    dry_run: bool = False
    verbosity: int = 1
    no_color: bool = False

    # Configuration
    config_path: Optional[Path] = None
    servers_file: Optional[Path] = None

    # Internal state (initialized lazily)
    _config: Optional[FleetConfig] = field(default=None, repr=False)
    _console: Console = field(default_factory=lambda: console, repr=False)

    def __post_init__(self) -> None:
        """Configure console after initialization."""
        self._console.configure(
            verbosity=self.verbosity,
            dry_run=self.dry_run,
            no_color=self.no_color,
        )

    @property
    def config(self) -> FleetConfig:
        """Get fleet configuration (lazy loaded)."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def console(self) -> Console:
        """Get console for output."""
        return self._console

    @property
    def server_list_path(self) -> Path:
        """Server list to read: command line first, then config."""
        return self.servers_file or self.config.servers_file

    @property
    def is_verbose(self) -> bool:
        """Check if verbose output is enabled."""
        return self.verbosity >= Verbosity.VERBOSE

    @property
    def is_debug(self) -> bool:
        """Check if debug output is enabled."""
        return self.verbosity >= Verbosity.DEBUG

    @property
    def is_quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self.verbosity <= Verbosity.QUIET


def create_context(
    dry_run: bool = False,
    verbose: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    config: Optional[Path] = None,
    servers: Optional[Path] = None,
) -> ExecutionContext:
    """Create an execution context from CLI options.

    Args:
        dry_run: Preview SSH calls without executing
        verbose: Increase verbosity (can be repeated)
        quiet: Suppress non-essential output
        no_color: Disable colored output
        config: Path to configuration file
        servers: Path to server list file

    Returns:
        Configured execution context
    """
    if quiet:
        verbosity = Verbosity.QUIET
    else:
        verbosity = min(Verbosity.NORMAL + verbose, Verbosity.DEBUG)

    return ExecutionContext(
        dry_run=dry_run,
        verbosity=verbosity,
        no_color=no_color,
        config_path=config,
        servers_file=servers,
    )
