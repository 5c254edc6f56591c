"""Launch an external executable and capture its output.

Blocking waits happen inside a dedicated ``ThreadPoolExecutor`` so the
FastAPI event loop is never blocked while simctl runs.
"""

from __future__ import annotations

import asyncio
import functools
import os
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional, Sequence

from simctl_api.errors import LaunchError
from simctl_api.models.results import ProcessOutput
from simctl_api.utils.logging import get_logger

log = get_logger(__name__)


def merged_environment(
    overrides: Optional[Mapping[str, str]],
) -> Optional[dict[str, str]]:
    """Return the ambient environment with *overrides* applied on top.

    ``None`` means "inherit unchanged", which is what ``subprocess`` expects.
    """
    if not overrides:
        return None
    env = os.environ.copy()
    env.update(overrides)
    return env


class ProcessRunner:
    """Runs one executable per call; holds no per-call state."""

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="simctl",
        )

    # ── blocking ──────────────────────────────────────────────────────

    def run_sync(
        self,
        executable: str,
        arguments: Sequence[str],
        env_overrides: Optional[Mapping[str, str]] = None,
        input: Optional[bytes] = None,
    ) -> ProcessOutput:
        """Run to completion and return everything it wrote.

        Must not be called from the event loop thread; use :meth:`run`.
        """
        argv = [executable, *arguments]
        started = time.monotonic()
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if input is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=merged_environment(env_overrides),
            )
        except (OSError, ValueError) as exc:
            log.warning("process.launch_failed", executable=executable, error=str(exc))
            raise LaunchError(executable, exc) from exc

        stdout, stderr = proc.communicate(input)
        elapsed = time.monotonic() - started
        log.debug(
            "process.exit",
            argv=argv[1:],
            rc=proc.returncode,
            out_bytes=len(stdout),
            elapsed=round(elapsed, 3),
        )
        return ProcessOutput(
            argv=list(arguments),
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_time=elapsed,
        )

    # ── awaitable ─────────────────────────────────────────────────────

    async def run(
        self,
        executable: str,
        arguments: Sequence[str],
        env_overrides: Optional[Mapping[str, str]] = None,
        input: Optional[bytes] = None,
    ) -> ProcessOutput:
        """Same as :meth:`run_sync`, waited for on the worker pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            functools.partial(
                self.run_sync, executable, arguments, env_overrides, input,
            ),
        )

    # ── detached ──────────────────────────────────────────────────────

    def spawn(
        self,
        executable: str,
        arguments: Sequence[str],
        env_overrides: Optional[Mapping[str, str]] = None,
    ) -> subprocess.Popen:
        """Start a process and return without waiting for it."""
        try:
            proc = subprocess.Popen(
                [executable, *arguments],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=merged_environment(env_overrides),
            )
        except (OSError, ValueError) as exc:
            log.warning("process.launch_failed", executable=executable, error=str(exc))
            raise LaunchError(executable, exc) from exc
        log.info("process.spawned", argv=list(arguments), pid=proc.pid)
        return proc

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
