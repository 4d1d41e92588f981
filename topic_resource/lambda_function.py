"""AWS Lambda entry point for the custom resource."""
from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from topic_resource.core.config import get_settings
from topic_resource.core.logging import setup_logging
from topic_resource.factory import get_handler
from topic_resource.handler import Handler, HandlerResult
from topic_resource.infra.cfn.response import build_response, send_response
from topic_resource.models.events import LifecycleEvent

logger = logging.getLogger(__name__)

# Time kept back to deliver the response after the handler gives up.
RESPONSE_RESERVE_SEC = 10.0


def _deadline(context: Any) -> Optional[float]:
    remaining_ms = getattr(context, "get_remaining_time_in_millis", None)
    if remaining_ms is None:
        return None
    return time.monotonic() + remaining_ms() / 1000 - RESPONSE_RESERVE_SEC


def run(event: Mapping[str, Any], context: Any, handler: Handler) -> dict:
    try:
        evt = LifecycleEvent.model_validate(event)
    except ValidationError as exc:
        # Without StackId/RequestType there is nothing CloudFormation can match.
        logger.error("Malformed custom resource event: %s", exc)
        raise

    result: HandlerResult = handler.handle(evt, deadline=_deadline(context))
    response = build_response(evt, result, getattr(context, "log_stream_name", ""))
    if evt.response_url:
        send_response(evt.response_url, response)
    return response.model_dump(by_alias=True, mode="json")


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict:
    setup_logging(get_settings().log_level)
    return run(event, context, get_handler())
