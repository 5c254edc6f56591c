"""FastAPI application entry-point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from simctl_api import __version__
from simctl_api.config import settings
from simctl_api.errors import CommandError, DecodeError, LaunchError, SimctlError
from simctl_api.models.responses import ErrorResponse
from simctl_api.routers import apps, devices, health, media, raw
from simctl_api.services.recordings import RecordingStore
from simctl_api.services.simctl import SimCtl
from simctl_api.utils.logging import get_logger, setup_logging

log = get_logger(__name__)

_ERROR_STATUS = {
    LaunchError: (503, "simctl could not be started"),
    CommandError: (502, "simctl reported a failure"),
    DecodeError: (502, "simctl output could not be parsed"),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    setup_logging()
    app.state.settings = settings
    app.state.simctl = SimCtl.from_settings(settings)
    app.state.recordings = RecordingStore(settings.simctl_recording_stop_timeout_seconds)
    log.info("app.started", launch_path=settings.simctl_launch_path)
    yield
    # Shutdown: stop recordings still running, release the worker pool
    await app.state.recordings.stop_all()
    app.state.simctl.close()


async def simctl_error_handler(request: Request, exc: SimctlError) -> JSONResponse:
    status_code, message = _ERROR_STATUS.get(type(exc), (500, "simctl error"))
    log.warning("request.simctl_error", path=request.url.path, kind=exc.kind, error=str(exc))
    body = ErrorResponse(detail=message, error_kind=exc.kind, diagnostic=exc.detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


app = FastAPI(
    title="simctl Tools API",
    description="iOS Simulator management service backed by xcrun simctl",
    version=__version__,
    lifespan=lifespan,
)

app.add_exception_handler(SimctlError, simctl_error_handler)

app.include_router(health.router)
app.include_router(devices.router)
app.include_router(apps.router)
app.include_router(media.router)
app.include_router(raw.router)
