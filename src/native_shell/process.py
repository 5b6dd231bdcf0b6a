"""Process launching and stream forwarding.

A child is started with ``asyncio.create_subprocess_exec``. Its stdout and
stderr are always pipes, drained by pump tasks running alongside
``process.wait()`` so a child that fills a pipe buffer never blocks on a
caller that is not reading yet. Stdin is a pipe fed from the caller's reader
when one is supplied, otherwise ``/dev/null``.

On POSIX the child leads its own session, so a timeout or a failing endpoint
kills the whole process group, grandchildren holding the pipes included.
"""

from __future__ import annotations

import asyncio
import codecs
import io
import logging
import os
import signal
from collections.abc import Mapping
from typing import IO, Any, Optional, Sequence

from .errors import ConfigurationError, LaunchError
from .types import ExecResult, ScriptContext

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
ENCODING = "utf-8"
KILL_GRACE_PERIOD = 5.0
KILLED_EXIT_CODE = -9


def build_environment(
    flattened: Mapping[str, str],
    base: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Return the inherited environment with the flattened bindings added."""
    env = dict(os.environ if base is None else base)
    for name, value in flattened.items():
        if not name or "=" in name or "\0" in name:
            raise ConfigurationError(f"invalid environment variable name: {name!r}")
        if "\0" in value:
            raise ConfigurationError(f"environment variable {name} contains a NUL byte")
        env[name] = value
    return env


def is_binary_stream(stream: IO[Any]) -> bool:
    """Check whether an endpoint takes or yields bytes rather than str."""
    if isinstance(stream, io.TextIOBase):
        return False
    if isinstance(stream, (io.BufferedIOBase, io.RawIOBase)):
        return True
    return "b" in getattr(stream, "mode", "")


class StderrTail:
    """Keeps the last ``limit`` characters written to it."""

    def __init__(self, limit: int):
        self.limit = limit
        self._parts: list[str] = []
        self._size = 0

    def append(self, text: str) -> None:
        if self.limit <= 0 or not text:
            return
        self._parts.append(text)
        self._size += len(text)
        if self._size > 2 * self.limit:
            self._compact()

    def _compact(self) -> None:
        joined = "".join(self._parts)[-self.limit:]
        self._parts = [joined]
        self._size = len(joined)

    def getvalue(self) -> str:
        return "".join(self._parts)[-self.limit:] if self.limit > 0 else ""


async def launch(
    argv: Sequence[str],
    environment: Mapping[str, str],
    *,
    stdin_attached: bool = False,
    cwd: Optional[str] = None,
) -> asyncio.subprocess.Process:
    """Start a child process.

    Raises:
        LaunchError: if the executable cannot be found or started.
    """
    logger.debug("launching %r (cwd=%s)", list(argv), cwd)
    try:
        return await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if stdin_attached else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(environment),
            cwd=cwd,
            start_new_session=os.name == "posix",
        )
    except FileNotFoundError as e:
        raise LaunchError(argv, "command not found") from e
    except PermissionError as e:
        raise LaunchError(argv, "permission denied") from e
    except OSError as e:
        raise LaunchError(argv, e.strerror or str(e)) from e


async def pump_output(
    stream: asyncio.StreamReader,
    endpoint: Optional[IO[Any]],
    *,
    tail: Optional[StderrTail] = None,
) -> None:
    """Forward a child output pipe to a caller endpoint until EOF."""
    binary = endpoint is not None and is_binary_stream(endpoint)
    decoder = codecs.getincrementaldecoder(ENCODING)(errors="replace")
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        final = not chunk
        if binary:
            if chunk:
                endpoint.write(chunk)
            if tail is not None:
                tail.append(decoder.decode(chunk, final=final))
        elif endpoint is not None or tail is not None:
            text = decoder.decode(chunk, final=final)
            if text:
                if endpoint is not None:
                    endpoint.write(text)
                if tail is not None:
                    tail.append(text)
        if final:
            break
    if endpoint is not None and hasattr(endpoint, "flush"):
        endpoint.flush()


async def pump_input(reader: IO[Any], stdin: asyncio.StreamWriter) -> None:
    """Feed the caller's reader into the child's stdin, then close it.

    A failing reader or a child that stops reading ends the pump quietly;
    the exit status of the child decides the outcome.
    """
    binary = is_binary_stream(reader)
    try:
        while True:
            try:
                chunk = await asyncio.to_thread(reader.read, CHUNK_SIZE)
            except (OSError, ValueError) as e:
                logger.warning("stdin source failed, closing child input: %s", e)
                break
            if not chunk:
                break
            stdin.write(chunk if binary else chunk.encode(ENCODING))
            await stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("child closed its stdin before input was exhausted")
    finally:
        try:
            stdin.close()
            await stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            pass


async def wait_for_exit(
    process: asyncio.subprocess.Process,
    context: ScriptContext,
    argv: Sequence[str] = (),
) -> ExecResult:
    """Drain the child's streams, wait for it and collect its exit status.

    Returns only after stdout and stderr reached EOF and the process exited.
    """
    tail = StderrTail(context.stderr_tail_limit)
    input_task = None
    if context.stdin is not None and process.stdin is not None:
        input_task = asyncio.create_task(pump_input(context.stdin, process.stdin))
    output_tasks = [
        asyncio.create_task(pump_output(process.stdout, context.stdout)),
        asyncio.create_task(pump_output(process.stderr, context.stderr, tail=tail)),
    ]

    async def _drain_and_wait() -> int:
        await asyncio.gather(*output_tasks)
        return await process.wait()

    timed_out = False
    try:
        try:
            exit_code = await asyncio.wait_for(_drain_and_wait(), context.timeout)
        except asyncio.TimeoutError:
            logger.warning("process %r timed out after %ss, killing it", list(argv), context.timeout)
            timed_out = True
            exit_code = await terminate(process, output_tasks)
    except BaseException:
        # an endpoint failed or the call was cancelled; never leave the child behind
        await terminate(process, output_tasks)
        raise
    finally:
        if input_task is not None:
            if not input_task.done():
                input_task.cancel()
            await asyncio.gather(input_task, return_exceptions=True)

    logger.debug("process %r exited with status %d", list(argv), exit_code)
    return ExecResult(
        exit_code=exit_code,
        stderr=tail.getvalue(),
        timed_out=timed_out,
        argv=list(argv),
    )


def kill_process_group(process: asyncio.subprocess.Process) -> None:
    """SIGKILL the child and everything it spawned into its session."""
    try:
        if os.name == "posix":
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except (ProcessLookupError, PermissionError):
        pass


async def terminate(
    process: asyncio.subprocess.Process,
    output_tasks: Sequence[asyncio.Task] = (),
) -> int:
    """Stop the pumps, kill the process group and reap the child.

    Returns the exit status, or KILLED_EXIT_CODE if the pipes stayed open
    longer than KILL_GRACE_PERIOD after the kill.
    """
    for task in output_tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*output_tasks, return_exceptions=True)
    kill_process_group(process)

    async def _discard_and_wait() -> int:
        # pipe readers pause when their buffer is full; keep reading so EOF is seen
        await asyncio.gather(
            pump_output(process.stdout, None),
            pump_output(process.stderr, None),
        )
        return await process.wait()

    try:
        return await asyncio.wait_for(_discard_and_wait(), KILL_GRACE_PERIOD)
    except asyncio.TimeoutError:
        logger.warning("process %d kept its pipes open after being killed", process.pid)
    if process.returncode is not None:
        return process.returncode
    return KILLED_EXIT_CODE
