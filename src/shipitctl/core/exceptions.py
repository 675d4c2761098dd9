"""Custom exceptions for shipitctl.

All exceptions provide:
- Clear error messages
- Optional hints for resolution
- Optional details for debugging
- Exit codes for proper shell integration
"""

from typing import Optional


class ShipitError(Exception):
    """Base exception for all shipitctl errors.

    Attributes:
        message: Human-readable error description
        hint: Suggested action to resolve the error
        details: Additional context for debugging
        exit_code: Shell exit code (1-127)
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or []

    def __str__(self) -> str:
        return self.message


class InvalidOperationError(ShipitError):
    """Unknown operation given on the command line.

    Raised once the server list is known to be non-empty, before any
    host is contacted.
    """
    exit_code = 1

    def __init__(
        self,
        operation: str,
        *,
        choices: Optional[list[str]] = None,
        hint: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.choices = choices or []
        if not hint and self.choices:
            hint = f"Use one of: {', '.join(self.choices)}"
        if operation:
            message = f"Invalid operation specified: {operation!r}"
        else:
            message = "No operation specified"
        super().__init__(message, hint=hint)


class ConfigurationError(ShipitError):
    """Configuration file or settings errors.

    Raised when:
    - Server list not found or unreadable
    - Invalid YAML syntax in the config file
    - Invalid configuration values
    """
    exit_code = 2


class ExecutionError(ShipitError):
    """Command execution failures.

    Raised when a local command returns non-zero and the caller asked
    for it to be checked. SSH calls to the fleet are run unchecked.
    """
    exit_code = 5

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        return_code: Optional[int] = None,
        stderr: Optional[str] = None,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        if not details:
            details = []
        if return_code is not None:
            details.append(f"Exit code: {return_code}")
        if stderr:
            details.append(f"Error output: {stderr}")
        super().__init__(message, hint=hint, details=details)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr
