"""Core framework components for shipitctl."""

from shipitctl.core.exceptions import (
    ShipitError,
    ConfigurationError,
    ExecutionError,
    InvalidOperationError,
)

from shipitctl.core.context import ExecutionContext, create_context
from shipitctl.core.output import console, Console, Verbosity
from shipitctl.core.config import FleetConfig, EnvOverrides, load_config
from shipitctl.core.audit import AuditLogger, AuditEvent, AuditEventType, AuditResult
from shipitctl.core.executor import CommandExecutor, CommandResult, build_ssh_command

__all__ = [
    # Exceptions
    "ShipitError",
    "ConfigurationError",
    "ExecutionError",
    "InvalidOperationError",
    # Context
    "ExecutionContext",
    "create_context",
    # Output
    "console",
    "Console",
    "Verbosity",
    # Config
    "FleetConfig",
    "EnvOverrides",
    "load_config",
    # Audit
    "AuditLogger",
    "AuditEvent",
    "AuditEventType",
    "AuditResult",
    # Executor
    "CommandExecutor",
    "CommandResult",
    "build_ssh_command",
]
