"""Core types for native-shell."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import IO, Any, Optional

from .errors import ScriptExecutionError

EXIT_VALUE_BINDING_NAME = "EXIT_VALUE"
"""Binding under which the exit status of the last evaluation is published."""

VARIABLES_BINDING_NAME = "variables"
"""Binding holding an external variable map the exit status is mirrored into."""

RETURN_CODE_OK = 0

DEFAULT_STDERR_TAIL_LIMIT = 64 * 1024


class Outcome(enum.Enum):
    """Success or failure of a finished process."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ScriptContext:
    """Per-call configuration: stream endpoints and process options.

    Endpoints may be text streams (``io.StringIO``, ``sys.stdout``) or binary
    streams (``io.BytesIO``). A ``None`` output endpoint discards the stream;
    a ``None`` stdin gives the child an immediate end-of-input.
    """

    stdin: Optional[IO[Any]] = None
    stdout: Optional[IO[Any]] = None
    stderr: Optional[IO[Any]] = None
    cwd: Optional[str] = None
    timeout: Optional[float] = None
    """Seconds before the process is killed. None waits indefinitely."""

    stderr_tail_limit: int = DEFAULT_STDERR_TAIL_LIMIT
    """Max characters of standard error kept for failure reporting."""


@dataclass
class ExecResult:
    """Result of one finished process."""

    exit_code: int
    stderr: str = ""
    """Tail of the captured standard error."""

    timed_out: bool = False
    argv: list[str] = field(default_factory=list)

    @property
    def outcome(self) -> Outcome:
        if self.exit_code == RETURN_CODE_OK and not self.timed_out:
            return Outcome.SUCCESS
        return Outcome.FAILURE

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def check(self) -> "ExecResult":
        """Return self, or raise ScriptExecutionError on failure."""
        if self.outcome is Outcome.FAILURE:
            raise ScriptExecutionError(self.exit_code, self.stderr, self)
        return self
