"""Failure taxonomy for simctl invocations.

Three kinds of failure reach callers, and each calls for a different message:

* ``LaunchError``  – the executable could not be started at all.
* ``CommandError`` – simctl ran and reported failure (non-zero exit).
* ``DecodeError``  – simctl succeeded but its output did not match the
  expected schema.
"""

from __future__ import annotations

from typing import Sequence


class SimctlError(Exception):
    """Base class for every failure surfaced by the executor."""

    kind = "simctl"

    @property
    def detail(self) -> str:
        return str(self)


class LaunchError(SimctlError):
    kind = "launch"

    def __init__(self, executable: str, cause: BaseException) -> None:
        self.executable = executable
        self.cause = cause
        super().__init__(f"could not launch {executable}: {cause}")


class CommandError(SimctlError):
    kind = "command"

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        diagnostic: bytes = b"",
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.diagnostic = diagnostic
        super().__init__(
            f"{' '.join(self.argv[:2])} exited with status {returncode}",
        )

    @property
    def detail(self) -> str:
        text = self.diagnostic.decode("utf-8", errors="replace").strip()
        return text or str(self)


class DecodeError(SimctlError):
    kind = "decode"

    def __init__(self, format: str, model: str, cause: BaseException) -> None:
        self.format = format
        self.model = model
        self.cause = cause
        super().__init__(f"{format} output did not match {model}: {cause}")
