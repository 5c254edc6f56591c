"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Force settings to use test-safe defaults before any import
os.environ.setdefault("SIMCTL_API_KEY", "")
os.environ.setdefault("SIMCTL_OPEN_SIMULATOR_APP", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from simctl_api.config import Settings
from simctl_api.services.executor import CommandExecutor
from simctl_api.services.recordings import RecordingStore
from simctl_api.services.simctl import SimCtl
from tests.fake_simctl import FakeRunner


@pytest.fixture
def fake_runner():
    """Provide a fresh FakeRunner."""
    return FakeRunner()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        simctl_launch_path="/usr/bin/xcrun",
        simctl_tool_arguments=["simctl"],
        simctl_poll_interval_seconds=0,
        simctl_open_simulator_app=False,
        simctl_media_dir=str(tmp_path / "media"),
        simctl_recording_stop_timeout_seconds=1.0,
        simctl_api_key="",
    )


@pytest.fixture
def executor(fake_runner, test_settings):
    return CommandExecutor(
        fake_runner,
        test_settings.simctl_launch_path,
        test_settings.simctl_tool_arguments,
    )


@pytest.fixture
def simctl(executor, fake_runner, test_settings):
    return SimCtl(executor, fake_runner, test_settings)


@pytest.fixture
def recordings():
    return RecordingStore(stop_timeout=1.0)


@pytest.fixture
async def client(simctl, recordings, test_settings):
    """Async test client with the fake runner injected."""
    from simctl_api.main import app as fastapi_app

    fastapi_app.state.settings = test_settings
    fastapi_app.state.simctl = simctl
    fastapi_app.state.recordings = recordings

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
