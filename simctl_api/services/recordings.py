"""In-memory registry of running screen recordings.

The executor hands back a live process and forgets it; this store is the
owner that later stops it.
"""

from __future__ import annotations

import asyncio
import subprocess
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from simctl_api.services.executor import RunningProcess
from simctl_api.utils.logging import get_logger

log = get_logger(__name__)


class Recording(BaseModel):
    recording_id: str = Field(default_factory=lambda: str(uuid4()))
    udid: str
    path: str
    pid: int
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    stopped_at: Optional[datetime] = None
    returncode: Optional[int] = None
    running: bool = True


class RecordingStore:
    def __init__(self, stop_timeout: float = 10.0) -> None:
        self._stop_timeout = stop_timeout
        self._recordings: dict[str, tuple[Recording, RunningProcess]] = {}

    def add(self, udid: str, path: str, handle: RunningProcess) -> Recording:
        rec = Recording(udid=udid, path=path, pid=handle.pid)
        self._recordings[rec.recording_id] = (rec, handle)
        log.info("recording.started", recording_id=rec.recording_id, udid=udid, pid=rec.pid)
        return rec

    @staticmethod
    def _refresh(rec: Recording, handle: RunningProcess) -> Recording:
        rc = handle.returncode
        if rc is None:
            return rec
        if rec.running:
            # recordVideo died on its own; the file is probably unusable
            log.warning("recording.exited", recording_id=rec.recording_id, rc=rc)
        return rec.model_copy(update={"running": False, "returncode": rc})

    def get(self, recording_id: str) -> Recording | None:
        entry = self._recordings.get(recording_id)
        if entry is None:
            return None
        rec = self._refresh(*entry)
        self._recordings[recording_id] = (rec, entry[1])
        return rec

    def list_recordings(self) -> list[Recording]:
        return [self.get(recording_id) for recording_id in list(self._recordings)]

    def _stop_sync(self, handle: RunningProcess) -> int:
        handle.interrupt()
        try:
            return handle.wait(timeout=self._stop_timeout)
        except subprocess.TimeoutExpired:
            log.warning("recording.kill", pid=handle.pid)
            handle.kill()
            return handle.wait()

    async def stop(self, recording_id: str) -> Recording | None:
        """Interrupt the recording so simctl writes the file, then forget it."""
        entry = self._recordings.pop(recording_id, None)
        if entry is None:
            return None
        rec, handle = entry
        loop = asyncio.get_running_loop()
        rc = await loop.run_in_executor(None, self._stop_sync, handle)
        stopped = rec.model_copy(
            update={"stopped_at": datetime.now(timezone.utc), "returncode": rc, "running": False},
        )
        log.info("recording.stopped", recording_id=recording_id, rc=rc)
        return stopped

    async def stop_all(self) -> None:
        for recording_id in list(self._recordings):
            await self.stop(recording_id)
