"""Execution modes for native-shell."""

from .base import NativeShell
from .bash import Bash
from .cmd import Cmd
from .executable import Executable, resolve_executable

SHELLS: dict[str, type] = {
    Bash.name: Bash,
    Cmd.name: Cmd,
    Executable.name: Executable,
}

SHELL_NAMES = list(SHELLS)


def create_shell(name: str) -> NativeShell:
    """Create a shell by name ("bash", "cmd" or "executable")."""
    try:
        shell_class = SHELLS[name]
    except KeyError:
        raise ValueError(
            f"unknown shell '{name}', expected one of: {', '.join(SHELL_NAMES)}"
        ) from None
    return shell_class()


__all__ = [
    "NativeShell",
    "Bash",
    "Cmd",
    "Executable",
    "SHELLS",
    "SHELL_NAMES",
    "create_shell",
    "resolve_executable",
]
