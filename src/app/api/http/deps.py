from fastapi import Request

from src.app.api.http.app_data import ApplicationDependencies
from src.app.core.services import DeploymentLogService


def get_deployment_log_service(request: Request) -> DeploymentLogService:
    """Get the deployment log service from the application state."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.deployment_log_service
