"""
Request Models for the deployer API Endpoints
Pydantic models for API request validation
"""

import re
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, field_validator


class ValidationRequest(BaseModel):
    """Request model for validating a configuration without deploying"""
    app_id: Optional[str] = Field(None, max_length=50)
    configuration: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('app_id')
    @classmethod
    def validate_app_id(cls, v: Optional[str]) -> Optional[str]:
        """App ids are plain slugs (letters, digits, hyphen, underscore)"""
        if v is None:
            return v
        v = v.strip()
        if v and not re.fullmatch(r'[a-zA-Z0-9_-]+', v):
            raise ValueError('app_id may only contain letters, numbers, hyphens and underscores')
        return v


class DeploymentRequest(ValidationRequest):
    """Request model for deploying an application"""
    timestamp: Optional[int] = None  # client time in ms, informational
    request_id: Optional[str] = Field(None, max_length=64)
