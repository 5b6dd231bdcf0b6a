"""Shell protocol shared by every execution mode."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class NativeShell(Protocol):
    """Turns script text into the argv of the process that runs it."""

    name: str

    def build_command(
        self,
        script: str,
        bindings: Mapping[str, str],
        environment: Mapping[str, str],
    ) -> list[str]:
        """Return argv for ``script``.

        ``bindings`` holds only the flattened bindings; ``environment`` is the
        full child environment (inherited variables plus bindings).
        """
        ...
