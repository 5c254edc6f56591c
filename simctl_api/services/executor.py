"""Run simctl commands and classify what came back.

Every invocation produces exactly one ``Success`` or ``Failure``.  Decoding
only happens after the process itself succeeded, so a ``CommandError`` and a
``DecodeError`` can never be confused.
"""

from __future__ import annotations

import asyncio
import signal
import subprocess
from typing import Callable, Mapping, Optional, Sequence

from simctl_api.errors import CommandError, DecodeError, LaunchError, SimctlError
from simctl_api.models.commands import SimctlCommand
from simctl_api.models.results import ExecutionResult, Failure, ProcessOutput, Success
from simctl_api.services.decoders import Decoder
from simctl_api.services.process_runner import ProcessRunner
from simctl_api.utils.logging import get_logger

log = get_logger(__name__)


class RunningProcess:
    """Handle to a detached simctl process, owned by whoever started it."""

    def __init__(self, proc: subprocess.Popen, argv: Sequence[str]) -> None:
        self._proc = proc
        self.argv = list(argv)

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._proc.poll()

    @property
    def is_running(self) -> bool:
        return self._proc.poll() is None

    def interrupt(self) -> None:
        """Send SIGINT; simctl finalizes recordings on interrupt."""
        if self.is_running:
            self._proc.send_signal(signal.SIGINT)

    def terminate(self) -> None:
        if self.is_running:
            self._proc.terminate()

    def kill(self) -> None:
        if self.is_running:
            self._proc.kill()

    def wait(self, timeout: Optional[float] = None) -> int:
        return self._proc.wait(timeout=timeout)

    def __repr__(self) -> str:
        return f"RunningProcess(pid={self.pid}, argv={self.argv!r})"


class CommandExecutor:
    """Turns command descriptions into process runs against one executable."""

    def __init__(
        self,
        runner: ProcessRunner,
        launch_path: str,
        tool_arguments: Sequence[str] = ("simctl",),
        environment: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._runner = runner
        self.launch_path = launch_path
        self.tool_arguments = list(tool_arguments)
        self.environment = dict(environment or {})
        self._pending: set[asyncio.Task] = set()

    def argv(self, command: SimctlCommand) -> list[str]:
        """Arguments passed after the executable path."""
        return [*self.tool_arguments, *command.render()]

    # ── classification ────────────────────────────────────────────────

    @staticmethod
    def _classify(output: ProcessOutput) -> ExecutionResult[bytes]:
        if output.failed:
            error = CommandError(
                output.argv,
                output.returncode,
                output.stderr or output.stdout,
            )
            log.warning(
                "simctl.failed",
                argv=output.argv,
                rc=output.returncode,
                diagnostic=error.detail[:200],
            )
            return Failure(error)
        log.debug(
            "simctl.ok",
            argv=output.argv,
            out_bytes=len(output.stdout),
            elapsed=round(output.elapsed_time, 3),
        )
        return Success(output.stdout)

    # ── one-shot ──────────────────────────────────────────────────────

    async def execute(self, command: SimctlCommand) -> ExecutionResult[bytes]:
        """Run *command* on the worker pool and wait for it."""
        try:
            output = await self._runner.run(
                self.launch_path,
                self.argv(command),
                self.environment or None,
                command.input,
            )
        except SimctlError as exc:
            return Failure(exc)
        return self._classify(output)

    def execute_sync(self, command: SimctlCommand) -> ExecutionResult[bytes]:
        """Blocking variant; never call from the event loop thread."""
        try:
            output = self._runner.run_sync(
                self.launch_path,
                self.argv(command),
                self.environment or None,
                command.input,
            )
        except SimctlError as exc:
            return Failure(exc)
        return self._classify(output)

    async def execute_decoded(
        self,
        command: SimctlCommand,
        decoder: Decoder,
    ) -> ExecutionResult:
        """Run *command* and decode its stdout with *decoder*."""
        result = await self.execute(command)
        if not result.ok:
            return result
        try:
            return Success(decoder.decode(result.value))
        except DecodeError as exc:
            log.warning(
                "simctl.decode_failed",
                command=command.subcommand,
                decoder=repr(decoder),
                error=str(exc)[:200],
            )
            return Failure(exc)

    def execute_with_callback(
        self,
        command: SimctlCommand,
        callback: Callable[[ExecutionResult[bytes]], None],
    ) -> asyncio.Task:
        """Fire-and-forget; *callback* receives the result exactly once."""
        task = asyncio.get_running_loop().create_task(self.execute(command))
        self._pending.add(task)

        def _done(t: asyncio.Task) -> None:
            self._pending.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is None:
                callback(t.result())
                return
            # e.g. the worker pool was shut down before the process started
            log.error(
                "simctl.callback_run_failed",
                command=command.subcommand,
                error=repr(exc),
            )
            callback(Failure(LaunchError(self.launch_path, exc)))

        task.add_done_callback(_done)
        return task

    # ── detached ──────────────────────────────────────────────────────

    def execute_detached(self, command: SimctlCommand) -> RunningProcess:
        """Start *command* and hand the live process to the caller.

        Raises ``LaunchError`` if the executable cannot be started.
        """
        argv = self.argv(command)
        proc = self._runner.spawn(self.launch_path, argv, self.environment or None)
        return RunningProcess(proc, argv)
