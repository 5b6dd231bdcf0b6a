"""Exceptions raised by native-shell.

Configuration and launch problems surface before a process exists and never
touch the result bindings. A process that ran and exited non-zero surfaces
as ScriptExecutionError after its exit status has been published.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .types import ExecResult


class NativeShellError(Exception):
    """Base class for all native-shell errors."""


class ConfigurationError(NativeShellError):
    """Invalid input detected before any process is spawned."""


class BindingError(ConfigurationError):
    """A binding value has a shape that cannot be flattened."""

    def __init__(self, name: str, message: str):
        super().__init__(f"binding '{name}': {message}")
        self.name = name


class TokenizeError(ConfigurationError):
    """A direct-executable command line could not be parsed."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.position = position


class LaunchError(NativeShellError):
    """The process could not be started at all."""

    def __init__(self, argv: Sequence[str], message: str):
        command = argv[0] if argv else ""
        super().__init__(f"{command}: {message}")
        self.argv = list(argv)


class ScriptExecutionError(NativeShellError):
    """The process ran and exited with a non-zero status."""

    def __init__(self, exit_code: int, stderr: str = "", result: "ExecResult | None" = None):
        message = f"script exited with status {exit_code}"
        if stderr:
            message += f": {stderr.rstrip()}"
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
        self.result = result
