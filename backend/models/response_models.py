"""
Response Models for the deployer API Endpoints
"""

from typing import List, Optional

from pydantic import BaseModel


class ValidationResultItem(BaseModel):
    """One diagnostic as returned to the client"""
    field: str
    valid: bool
    message: str
    type: str  # "error", "warning", "info"


class ValidationResponse(BaseModel):
    valid: bool
    results: List[ValidationResultItem]
    summary: str


class DeploymentInfo(BaseModel):
    container_id: str
    status: str
    created_at: str


class DeploymentResponse(BaseModel):
    status: str
    message: str
    request_id: Optional[str] = None
    deployment: DeploymentInfo
    validation: ValidationResponse


class StatusResponse(BaseModel):
    server_status: str
    docker_api_version: str
    docker_ok: bool


class AppInfo(BaseModel):
    id: str
    title: str
    description: str
    sensitive_fields: List[str]
