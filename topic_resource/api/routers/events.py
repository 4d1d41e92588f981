"""Custom resource events over HTTP (same contract as the Lambda entry point)."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from topic_resource.api.dependencies import handler_dependency
from topic_resource.handler import Handler
from topic_resource.infra.cfn.response import build_response
from topic_resource.models.events import CustomResourceResponse, LifecycleEvent

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=CustomResourceResponse)
def handle_event(
    event: LifecycleEvent,
    handler: Handler = Depends(handler_dependency),
) -> CustomResourceResponse:
    """
    Run one Create/Update/Delete event synchronously.

    Failures are reported in the body (`Status: FAILED`) with HTTP 200,
    exactly as they would be sent to CloudFormation.
    """
    result = handler.handle(event)
    return build_response(event, result)
