"""Bash shell mode."""

from __future__ import annotations

from collections.abc import Mapping


class Bash:
    """Runs the script verbatim with ``bash -c``.

    Bash's own expansion applies: ``$name`` and ``${name}`` read the
    flattened bindings from the environment, unset names expand to nothing.
    """

    name = "bash"

    def __init__(self, binary: str = "bash"):
        self.binary = binary

    def build_command(
        self,
        script: str,
        bindings: Mapping[str, str],
        environment: Mapping[str, str],
    ) -> list[str]:
        return [self.binary, "-c", script]

    def __repr__(self) -> str:
        return f"Bash(binary={self.binary!r})"
