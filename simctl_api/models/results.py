"""Process and execution result structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from pydantic import BaseModel

from simctl_api.errors import SimctlError

T = TypeVar("T")


class ProcessOutput(BaseModel):
    """Internal result from one finished process."""

    argv: list[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""
    elapsed_time: float = 0.0

    @property
    def failed(self) -> bool:
        return self.returncode != 0


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: SimctlError

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    def unwrap(self):
        raise self.error


ExecutionResult = Union[Success[T], Failure]
