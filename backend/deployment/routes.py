"""
Deployment API routes

Provides REST endpoints for:
- Backend and Docker daemon status
- Listing the deployable application catalog
- Validating a configuration without deploying
- Deploying an application (decrypt, validate, then start the deployment)
"""

import asyncio
import logging
from typing import Any, Dict, List

from docker.errors import DockerException
from fastapi import APIRouter, HTTPException, Depends, Request

from deployment.catalog import APP_CATALOG
from deployment.config_validator import ConfigurationValidator, get_configuration_validator
from deployment.executor import DeploymentExecutor, InvalidConfigurationError
from deployment.field_decryptor import DecryptionError
from deployment.intake import IntakeResult, process_configuration
from models.request_models import ValidationRequest, DeploymentRequest
from models.response_models import AppInfo, DeploymentResponse, StatusResponse, ValidationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["deployments"])

_executor = DeploymentExecutor()


def get_deployment_executor() -> DeploymentExecutor:
    """Dependency injection for the deployment executor."""
    return _executor


def _require_app_id(app_id) -> str:
    if not app_id:
        raise HTTPException(status_code=400, detail="app_id is required")
    return app_id


async def _run_intake(
    app_id: str,
    configuration: Dict[str, Any],
    validator: ConfigurationValidator
) -> IntakeResult:
    """Run the intake pipeline in a worker thread (rules do DNS and filesystem I/O)."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, process_configuration, app_id, configuration, validator)
    except DecryptionError as e:
        logger.warning(f"Decryption failed for {app_id}: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to decrypt configuration: {e}")


@router.get("/status", response_model=StatusResponse)
async def get_status(request: Request):
    """Backend health plus Docker daemon connectivity"""
    client = getattr(request.app.state, 'docker_client', None)
    if client is None:
        raise HTTPException(status_code=500, detail="Failed to connect to Docker daemon")

    loop = asyncio.get_running_loop()
    try:
        version = await loop.run_in_executor(None, client.version)
    except (DockerException, OSError) as e:
        logger.error(f"Error pinging Docker for status: {e}")
        raise HTTPException(status_code=500, detail="Failed to connect to Docker daemon")

    api_version = version.get('ApiVersion', '')
    return StatusResponse(
        server_status="OK",
        docker_api_version=api_version,
        docker_ok=bool(api_version),
    )


@router.get("/apps", response_model=List[AppInfo])
async def list_apps():
    """Deployable applications"""
    return [
        AppInfo(
            id=app.app_id.value,
            title=app.title,
            description=app.description,
            sensitive_fields=list(app.sensitive_fields),
        )
        for app in APP_CATALOG.values()
    ]


@router.post("/validate", response_model=ValidationResponse)
async def validate_config(
    request: ValidationRequest,
    validator: ConfigurationValidator = Depends(get_configuration_validator)
):
    """
    Validate a deployment configuration without deploying.

    The configuration may carry encrypted fields under '_encryption'; they
    are decrypted before validation.
    """
    app_id = _require_app_id(request.app_id)
    logger.info(f"Validating configuration for app: {app_id}")

    try:
        result = await _run_intake(app_id, request.configuration, validator)
        return result.report.to_dict()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error validating configuration for {app_id}: {type(e).__name__}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/deploy", response_model=DeploymentResponse)
async def deploy_app(
    request: DeploymentRequest,
    validator: ConfigurationValidator = Depends(get_configuration_validator),
    executor: DeploymentExecutor = Depends(get_deployment_executor)
):
    """
    Deploy an application.

    Sensitive fields are decrypted, the full configuration is validated, and
    only a configuration without blocking errors is handed to the executor.
    A rejected configuration returns 422 with the validation report.
    """
    app_id = _require_app_id(request.app_id)
    logger.info(f"Received deployment request for app: {app_id} (request ID: {request.request_id})")

    try:
        result = await _run_intake(app_id, request.configuration, validator)

        try:
            deployment = executor.execute(app_id, result.configuration, result.report, request.request_id)
        except InvalidConfigurationError as e:
            raise HTTPException(
                status_code=422,
                detail={
                    "message": f"Configuration rejected: {e.report.summary}",
                    "validation": e.report.to_dict(),
                },
            )

        return {
            "status": "success",
            "message": f"Successfully initiated deployment of {app_id}",
            "request_id": request.request_id,
            "deployment": deployment.to_dict(),
            "validation": result.report.to_dict(),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deploying {app_id}: {type(e).__name__}")
        raise HTTPException(status_code=500, detail="Internal server error")
