"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from src.app.api.http.app_data import ApplicationDependencies, build_dependencies
from src.app.api.http.routers import deploylog


def create_app(app_deps: ApplicationDependencies | None = None) -> FastAPI:
    """Create the API application.

    Args:
        app_deps: Dependencies to serve with. Built from the loaded
            configuration and the kr8s controller when omitted.
    """
    if app_deps is None:
        from src.app.runtime.context import get_config
        from src.infra.k8s.helpers import get_k8s_controller

        app_deps = build_dependencies(get_config(), get_k8s_controller())

    app = FastAPI(title="Deployment Logs API")
    app.state.app_dependencies = app_deps
    app.include_router(deploylog.router)
    return app
