"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is driven by environment variables."""

    # External tool
    simctl_launch_path: str = "/usr/bin/xcrun"
    simctl_tool_arguments: list[str] = Field(default_factory=lambda: ["simctl"])
    # Merged on top of the ambient environment for every invocation
    simctl_environment: dict[str, str] = Field(default_factory=dict)

    # Worker pool running the blocking subprocess waits
    simctl_worker_threads: int = 4

    # Device list change feed
    simctl_poll_interval_seconds: float = 5.0

    # Simulator.app is opened before booting a device
    simctl_open_simulator_app: bool = True
    simctl_open_path: str = "/usr/bin/open"

    # Screenshots and recordings land here unless a path is given
    simctl_media_dir: str = Field(default="/tmp/simctl-media")
    simctl_recording_stop_timeout_seconds: float = 10.0

    # API key
    simctl_api_key: str = ""

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton – import this from anywhere
settings = Settings()
