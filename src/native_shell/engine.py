"""NativeShellEngine - the primary API for native-shell.

Example usage:
    from native_shell import NativeShellEngine, ScriptContext

    engine = NativeShellEngine()
    out = io.StringIO()
    engine.run("echo $greeting", {"greeting": "hello"}, context=ScriptContext(stdout=out))
    out.getvalue()  # "hello\\n"

    # Without a shell; $name is substituted by the tokenizer
    engine = NativeShellEngine(Executable())
    result = await engine.exec("printenv greeting", {"greeting": "hi"})
    result.exit_code  # 0
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import MutableMapping
from typing import Any, Optional, Union

import nest_asyncio  # type: ignore[import-untyped]

from .bindings import flatten_bindings
from .process import build_environment, launch, wait_for_exit
from .shells import Bash, NativeShell, create_shell
from .types import (
    EXIT_VALUE_BINDING_NAME,
    VARIABLES_BINDING_NAME,
    ExecResult,
    ScriptContext,
)

logger = logging.getLogger(__name__)


def publish_exit_code(exit_code: int, bindings: MutableMapping[str, Any]) -> None:
    """Record the exit status in the bindings and the external variable map."""
    bindings[EXIT_VALUE_BINDING_NAME] = exit_code
    variables = bindings.get(VARIABLES_BINDING_NAME)
    if isinstance(variables, MutableMapping):
        variables[EXIT_VALUE_BINDING_NAME] = exit_code


class NativeShellEngine:
    """Runs scripts as external processes with bindings exposed as env vars.

    Each call launches exactly one process. The engine holds a shell (the
    execution mode), an engine-scope bindings dict used when a call passes
    none, and a default ScriptContext used when a call passes none.
    """

    def __init__(
        self,
        shell: Union[NativeShell, str, None] = None,
        *,
        bindings: Optional[MutableMapping[str, Any]] = None,
        context: Optional[ScriptContext] = None,
    ):
        """Initialize the engine.

        Args:
            shell: Execution mode, or its name. Defaults to Bash().
            bindings: Engine-scope bindings. A fresh dict if not provided.
            context: Default per-call context. Discards output if not provided.
        """
        if isinstance(shell, str):
            shell = create_shell(shell)
        self._shell: NativeShell = shell if shell is not None else Bash()
        self.bindings: MutableMapping[str, Any] = bindings if bindings is not None else {}
        self.context = context or ScriptContext()

    @property
    def shell(self) -> NativeShell:
        return self._shell

    def get(self, name: str, default: Any = None) -> Any:
        """Read an engine-scope binding."""
        return self.bindings.get(name, default)

    def put(self, name: str, value: Any) -> None:
        """Set an engine-scope binding."""
        self.bindings[name] = value

    async def exec(
        self,
        script: str,
        bindings: Optional[MutableMapping[str, Any]] = None,
        *,
        context: Optional[ScriptContext] = None,
    ) -> ExecResult:
        """Run a script and return its result without raising on non-zero exit.

        The exit status is published into ``bindings`` (and its ``variables``
        map, if any) before returning.

        Raises:
            ConfigurationError: bad binding shape or unparsable command line.
            LaunchError: the process could not be started.
        """
        if bindings is None:
            bindings = self.bindings
        context = context or self.context

        flattened = flatten_bindings(bindings)
        environment = build_environment(flattened)
        argv = self._shell.build_command(script, flattened, environment)
        process = await launch(
            argv,
            environment,
            stdin_attached=context.stdin is not None,
            cwd=context.cwd,
        )
        result = await wait_for_exit(process, context, argv)

        publish_exit_code(result.exit_code, bindings)
        logger.debug("%s: published exit status %d", self._shell.name, result.exit_code)
        return result

    async def evaluate(
        self,
        script: str,
        bindings: Optional[MutableMapping[str, Any]] = None,
        *,
        context: Optional[ScriptContext] = None,
    ) -> int:
        """Run a script and return its exit status, 0 on success.

        Raises:
            ScriptExecutionError: the process exited non-zero (bindings are
                already updated) or timed out.
            ConfigurationError: bad binding shape or unparsable command line.
            LaunchError: the process could not be started.
        """
        result = await self.exec(script, bindings, context=context)
        return result.check().exit_code

    def run(
        self,
        script: str,
        bindings: Optional[MutableMapping[str, Any]] = None,
        *,
        context: Optional[ScriptContext] = None,
    ) -> int:
        """Synchronous evaluate().

        Works inside an already running event loop (Jupyter, async
        frameworks) by applying nest_asyncio.
        """
        try:
            asyncio.get_running_loop()
            nest_asyncio.apply()
        except RuntimeError:
            # No running event loop, asyncio.run() will work fine
            pass
        return asyncio.run(self.evaluate(script, bindings, context=context))

    def __repr__(self) -> str:
        return f"NativeShellEngine(shell={self._shell!r})"
