"""
Starlette integration.

`install_profiling` is called once while building the application. It is a
no-op outside the enabled environments (`development`, `test`); otherwise it
registers `ProfilingMiddleware`, which exposes the controller to every request
as `request.state.profiler`:

    app = Starlette(routes=...)
    install_profiling(app)

    async def handler(request):
        profiler = get_profiler(request)
        profiler.start_profiling()
        ...
        profiler.stop_profiling()
"""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from . import api
from .config import ProfilerSettings
from .controller import SessionController
from .errors import ProfilingDisabledError

logger = logging.getLogger(__name__)


class ProfilingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, controller: SessionController) -> None:
        super().__init__(app)
        self.controller = controller

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.profiler = self.controller
        return await call_next(request)


def install_profiling(
    app: Starlette,
    settings: ProfilerSettings | None = None,
    *,
    controller: SessionController | None = None,
) -> SessionController | None:
    """Register profiling on `app` when the environment allows it.

    Returns the controller in use, or None when profiling stays disabled.
    """
    settings = ProfilerSettings.from_env() if settings is None else settings
    if not settings.enabled:
        logger.info("Profiling disabled in %r environment", settings.environment)
        return None

    controller = SessionController(settings) if controller is None else controller
    app.add_middleware(ProfilingMiddleware, controller=controller)
    app.state.profiler = controller
    api.set_default_controller(controller)
    logger.info("Profiling enabled (%s); reports go to %s", settings.environment, controller.report_dir)
    return controller


def get_profiler(request: Request) -> SessionController:
    """Return the controller registered for this request's application."""
    controller = getattr(request.state, "profiler", None)
    if controller is None:
        raise ProfilingDisabledError("Profiling is not installed for this application")
    return controller
