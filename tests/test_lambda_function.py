import importlib
import re
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest
from pydantic import ValidationError

from topic_resource import lambda_function
from topic_resource.handler import Handler, HandlerResult
from topic_resource.infra.cfn import response as cfn_response
from topic_resource.infra.cfn.response import MAX_REASON_LEN, build_response
from topic_resource.models.events import LifecycleEvent

from .fakes import STACK_ID, STACK_SUFFIX, topic_props

RESPONSE_URL = "https://cloudformation-custom-resource-response.s3.amazonaws.com/signed"


@pytest.fixture
def handler(msk, kms, secret_store, provider, settings, settles):
    return Handler(msk, kms, secret_store, provider, settings, settle=settles)


@pytest.fixture
def sent(monkeypatch):
    calls = []
    monkeypatch.setattr(lambda_function, "send_response", lambda url, resp: calls.append((url, resp)))
    return calls


def lambda_context(remaining_ms=300_000):
    return SimpleNamespace(
        get_remaining_time_in_millis=lambda: remaining_ms,
        log_stream_name="2026/10/19/[$LATEST]abcdef",
    )


def create_event(**props):
    return {
        "RequestType": "Create",
        "StackId": STACK_ID,
        "RequestId": "req-1",
        "LogicalResourceId": "OrdersTopic",
        "ResourceType": "Custom::MskTopic",
        "ResponseURL": RESPONSE_URL,
        "ResourceProperties": topic_props(**props),
    }


def test_success_is_sent(handler, sent):
    doc = lambda_function.run(create_event(), lambda_context(), handler)

    assert doc["Status"] == "SUCCESS"
    assert doc["PhysicalResourceId"] == f"orders-{STACK_SUFFIX}"
    [(url, resp)] = sent
    assert url == RESPONSE_URL
    assert resp.data == {"UsernameSuffix": STACK_SUFFIX}


def test_failure_points_to_log_stream(handler, sent):
    doc = lambda_function.run(create_event(Partitions="x"), lambda_context(), handler)

    assert doc["Status"] == "FAILED"
    assert doc["Reason"].startswith("Partitions:")
    assert "2026/10/19/[$LATEST]abcdef" in doc["Reason"]
    assert sent[0][1].status.value == "FAILED"


def test_no_time_left(handler, sent, provider):
    doc = lambda_function.run(create_event(), lambda_context(remaining_ms=5_000), handler)

    assert doc["Status"] == "FAILED"
    assert provider.connected == []
    assert len(sent) == 1


def test_malformed_event(handler, sent):
    with pytest.raises(ValidationError):
        lambda_function.run({"ResourceProperties": {}}, lambda_context(), handler)
    assert sent == []


def test_reason_truncated():
    evt = LifecycleEvent.model_validate({"RequestType": "Create", "StackId": STACK_ID})
    result = HandlerResult(physical_resource_id="id", error=ValueError("x" * 5000))

    resp = build_response(evt, result)

    assert len(resp.reason) == MAX_REASON_LEN


def test_send_response_put(monkeypatch):
    calls = []

    def fake_put(url, content, headers, timeout):
        calls.append((url, content, headers))
        return httpx.Response(200, request=httpx.Request("PUT", url))

    monkeypatch.setattr(cfn_response.httpx, "put", fake_put)
    evt = LifecycleEvent.model_validate({"RequestType": "Delete", "StackId": STACK_ID, "PhysicalResourceId": "p"})

    cfn_response.send_response(RESPONSE_URL, build_response(evt, HandlerResult(physical_resource_id="p")))

    [(url, body, headers)] = calls
    assert url == RESPONSE_URL
    assert headers == {"Content-Type": ""}
    assert '"Status":"SUCCESS"' in body


def test_stack_template_points_at_lambda_handler():
    template = Path(__file__).resolve().parent.parent / "deploy" / "cfn-stack.yaml"
    handler_path = re.search(r"^\s+Handler:\s*(\S+)\s*$", template.read_text(), re.MULTILINE).group(1)

    module_name, attr = handler_path.rsplit(".", 1)
    assert getattr(importlib.import_module(module_name), attr) is lambda_function.lambda_handler
