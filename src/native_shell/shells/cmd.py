"""Windows cmd.exe shell mode."""

from __future__ import annotations

from collections.abc import Mapping


class Cmd:
    """Runs the script with ``cmd.exe /c``; bindings are read as ``%name%``."""

    name = "cmd"

    def __init__(self, binary: str = "cmd.exe"):
        self.binary = binary

    def build_command(
        self,
        script: str,
        bindings: Mapping[str, str],
        environment: Mapping[str, str],
    ) -> list[str]:
        return [self.binary, "/c", script]

    def __repr__(self) -> str:
        return f"Cmd(binary={self.binary!r})"
