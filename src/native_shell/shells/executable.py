"""Direct-executable mode: no shell, hand-parsed arguments."""

from __future__ import annotations

import os
import shutil
from collections.abc import Mapping
from typing import Optional

from ..errors import LaunchError
from ..tokenizer import tokenize


def resolve_executable(command: str, environment: Mapping[str, str]) -> Optional[str]:
    """Find ``command`` on the child's PATH.

    Commands containing a path separator are returned unchanged and left to
    the OS to resolve relative to the working directory.
    """
    if os.sep in command or (os.altsep and os.altsep in command):
        return command
    return shutil.which(command, path=environment.get("PATH", os.defpath))


class Executable:
    """Runs the first word of the script as a program, the rest as its args.

    See :mod:`native_shell.tokenizer` for the quoting and substitution rules.
    """

    name = "executable"

    def build_command(
        self,
        script: str,
        bindings: Mapping[str, str],
        environment: Mapping[str, str],
    ) -> list[str]:
        # references resolve against the bindings only, never inherited variables
        argv = tokenize(script, bindings)
        resolved = resolve_executable(argv[0], environment)
        if resolved is None:
            raise LaunchError(argv, "command not found")
        return [resolved, *argv[1:]]

    def __repr__(self) -> str:
        return "Executable()"
