"""Fleet services: server list, remote commands and the dispatcher."""

from shipitctl.services.servers import ServerEntry, load_server_list, parse_server_line
from shipitctl.services.commands import Operation, render_remote_command
from shipitctl.services.dispatcher import DispatchReport, FleetDispatcher, HostResult

__all__ = [
    "ServerEntry",
    "load_server_list",
    "parse_server_line",
    "Operation",
    "render_remote_command",
    "DispatchReport",
    "FleetDispatcher",
    "HostResult",
]
