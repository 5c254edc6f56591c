"""Request-scoped access to the objects created at startup."""

from __future__ import annotations

from fastapi import Request

from simctl_api.config import Settings
from simctl_api.services.recordings import RecordingStore
from simctl_api.services.simctl import SimCtl


def get_simctl(request: Request) -> SimCtl:
    return request.app.state.simctl


def get_recordings(request: Request) -> RecordingStore:
    return request.app.state.recordings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
