"""Server list reader.

The server list is a plain text file with one build server per line:

    <hostname> <port>

The hostname is only used in progress output; the port selects the
server behind the relay host. Fields are not validated here: a missing
or garbled port is handed to ssh, which fails and gets reported like
any other unreachable host. Blank lines are not skipped either: each
one becomes an entry with empty fields and a doomed ssh call.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from shipitctl.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class ServerEntry:
    """One line of the server list."""
    hostname: str
    port: str
    line_number: int

    @property
    def label(self) -> str:
        """Display form used in progress lines."""
        return f"{self.hostname} ({self.port})"


def parse_server_line(line: str, line_number: int) -> ServerEntry:
    """Split a line into hostname and port.

    Missing fields become empty strings, extra fields are ignored.
    """
    fields = line.split()
    hostname = fields[0] if fields else ""
    port = fields[1] if len(fields) > 1 else ""
    return ServerEntry(hostname=hostname, port=port, line_number=line_number)


def iter_server_lines(lines: Iterable[str]) -> Iterator[ServerEntry]:
    """Yield one entry per line, in file order."""
    for line_number, line in enumerate(lines, start=1):
        yield parse_server_line(line, line_number)


def load_server_list(path: Path) -> list[ServerEntry]:
    """Read the whole server list.

    The file is read completely before any host is contacted, so the
    dispatch loop never shares a file handle with a child process.

    Raises:
        ConfigurationError: If the file is missing or unreadable
    """
    try:
        with open(path, encoding="utf-8") as f:
            return list(iter_server_lines(f))
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Server list not found: {path}",
            hint="Run from the directory holding servers.list or pass --servers",
        ) from e
    except (PermissionError, IsADirectoryError) as e:
        raise ConfigurationError(
            f"Cannot read server list: {path}",
            details=[str(e)],
        ) from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(
            f"Server list is not valid UTF-8: {path}",
            details=[str(e)],
        ) from e
