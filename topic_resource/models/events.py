"""CloudFormation custom resource wire models."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestType(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResponseStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class LifecycleEvent(BaseModel):
    """Inbound custom resource request as delivered to the Lambda function."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    request_type: str = Field(..., alias="RequestType")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(default="", alias="RequestId")
    logical_resource_id: str = Field(default="", alias="LogicalResourceId")
    physical_resource_id: str = Field(default="", alias="PhysicalResourceId")
    resource_type: str = Field(default="", alias="ResourceType")
    response_url: str = Field(default="", alias="ResponseURL")
    resource_properties: Dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")
    old_resource_properties: Optional[Dict[str, Any]] = Field(
        default=None, alias="OldResourceProperties"
    )


class CustomResourceResponse(BaseModel):
    """Response document CloudFormation expects at ``ResponseURL``."""

    model_config = ConfigDict(populate_by_name=True)

    status: ResponseStatus = Field(..., alias="Status")
    reason: str = Field(default="", alias="Reason")
    physical_resource_id: str = Field(..., alias="PhysicalResourceId")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(default="", alias="RequestId")
    logical_resource_id: str = Field(default="", alias="LogicalResourceId")
    no_echo: bool = Field(default=False, alias="NoEcho")
    data: Dict[str, Any] = Field(default_factory=dict, alias="Data")
