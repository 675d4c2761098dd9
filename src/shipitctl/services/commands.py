"""Remote command templates for fleet operations.

Each operation maps to one fixed shell command line run on the build
server. Templates are rendered with Jinja2 from the fleet configuration;
every interpolated value goes through the ``quote`` filter.
"""

import shlex
from dataclasses import dataclass
from enum import Enum

from jinja2 import DictLoader, Environment, StrictUndefined

from shipitctl.core.config import FleetConfig
from shipitctl.core.exceptions import InvalidOperationError


class Operation(str, Enum):
    """Operations the dispatcher can run on every server."""
    RESTART = "restart"
    STOP = "stop"
    UPDATE_KEYS = "update-keys"

    @classmethod
    def choices(cls) -> list[str]:
        return [op.value for op in cls]

    @classmethod
    def parse(cls, value: str) -> "Operation":
        """Look up an operation by its command-line name.

        Raises:
            InvalidOperationError: If the name is not a known operation
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidOperationError(value, choices=cls.choices()) from None


@dataclass(frozen=True)
class OperationText:
    """User-facing wording for one operation."""
    progress: str  # "Restarting ShipIt worker"
    action: str    # "restart ShipIt worker"


OPERATION_TEXT: dict[Operation, OperationText] = {
    Operation.RESTART: OperationText(
        progress="Restarting ShipIt worker",
        action="restart ShipIt worker",
    ),
    Operation.STOP: OperationText(
        progress="Stopping ShipIt worker",
        action="stop ShipIt worker",
    ),
    Operation.UPDATE_KEYS: OperationText(
        progress="Updating contributor pubkeys",
        action="update contributor pubkeys",
    ),
}

COMMAND_TEMPLATES: dict[str, str] = {
    Operation.RESTART.value: (
        "cd {{ deploy_dir | quote }} && git pull -q"
        " && systemctl restart {{ service_name | quote }}"
    ),
    Operation.STOP.value: "systemctl stop {{ service_name | quote }}",
    Operation.UPDATE_KEYS.value: "curl -fsSL {{ pubkeys_url | quote }} | bash",
}


def _make_environment() -> Environment:
    env = Environment(
        loader=DictLoader(COMMAND_TEMPLATES),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=False,
    )
    env.filters["quote"] = shlex.quote
    return env


jinja_env = _make_environment()


def render_remote_command(operation: Operation, config: FleetConfig) -> str:
    """Render the remote shell command for an operation.

    Args:
        operation: Operation to run
        config: Fleet configuration supplying paths and URLs

    Returns:
        Command line executed by the remote shell
    """
    template = jinja_env.get_template(operation.value)
    return template.render(
        deploy_dir=config.deploy_dir,
        service_name=config.service_name,
        pubkeys_url=config.pubkeys_url,
    )


def progress_message(operation: Operation, label: str) -> str:
    """``Restarting ShipIt worker on web1 (2201)``"""
    return f"{OPERATION_TEXT[operation].progress} on {label}"


def failure_message(operation: Operation, label: str) -> str:
    """``Failed to restart ShipIt worker on web1 (2201)!``"""
    return f"Failed to {OPERATION_TEXT[operation].action} on {label}!"
