"""Delivery of the custom resource response to CloudFormation."""
from __future__ import annotations

import logging

import httpx

from topic_resource.handler import HandlerResult
from topic_resource.models.events import CustomResourceResponse, LifecycleEvent, ResponseStatus

logger = logging.getLogger(__name__)

# CloudFormation truncates longer reasons
MAX_REASON_LEN = 4000


def build_response(event: LifecycleEvent, result: HandlerResult, log_stream: str = "") -> CustomResourceResponse:
    if result.ok:
        status, reason = ResponseStatus.SUCCESS, ""
    else:
        status = ResponseStatus.FAILED
        reason = str(result.error)
        if log_stream:
            reason = f"{reason} (see CloudWatch log stream {log_stream})"
    return CustomResourceResponse(
        status=status,
        reason=reason[:MAX_REASON_LEN],
        physical_resource_id=result.physical_resource_id,
        stack_id=event.stack_id,
        request_id=event.request_id,
        logical_resource_id=event.logical_resource_id,
        data=result.data,
    )


def send_response(url: str, response: CustomResourceResponse, *, timeout: float = 30.0) -> None:
    """PUT *response* to the pre-signed S3 *url* CloudFormation gave us."""
    body = response.model_dump_json(by_alias=True)
    # The pre-signed URL is signed for an empty content type.
    resp = httpx.put(url, content=body, headers={"Content-Type": ""}, timeout=timeout)
    resp.raise_for_status()
    logger.info("Response sent to CloudFormation: status=%s", response.status.value)
