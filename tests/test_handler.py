import uuid

import pytest

from topic_resource.core.exceptions import InvalidTopicInfo, InvocationCancelled, MissingClusterConfiguration
from topic_resource.handler import PROP_USERNAME_SUFFIX, Handler
from topic_resource.models.events import LifecycleEvent

from .fakes import CLUSTER_ARN, STACK_ID, STACK_SUFFIX, topic_props

TOPIC = f"orders-{STACK_SUFFIX}"
USERS = [{"Username": "alice", "Permissions": ["READ"]}]


@pytest.fixture
def handler(msk, kms, secret_store, provider, settings, settles, clock):
    return Handler(msk, kms, secret_store, provider, settings, settle=settles, clock=clock, sleeper=clock.sleep)


def event(request_type, props=None, old=None, physical_id=""):
    doc = {
        "RequestType": request_type,
        "StackId": STACK_ID,
        "RequestId": "req-1",
        "LogicalResourceId": "OrdersTopic",
        "ResourceType": "Custom::MskTopic",
        "ResourceProperties": props if props is not None else topic_props(),
    }
    if old is not None:
        doc["OldResourceProperties"] = old
    if physical_id:
        doc["PhysicalResourceId"] = physical_id
    return LifecycleEvent.model_validate(doc)


class TestCreate:
    def test_success(self, handler, cluster, provider):
        result = handler.handle(event("Create", topic_props(Users=USERS)))

        assert result.ok
        assert result.physical_resource_id == TOPIC
        assert result.data == {PROP_USERNAME_SUFFIX: STACK_SUFFIX}
        assert TOPIC in cluster.topics
        assert provider.connected == [CLUSTER_ARN]

    def test_invalid_properties_get_generated_id(self, handler, provider):
        result = handler.handle(event("Create", {"Name": "orders"}))

        assert isinstance(result.error, InvalidTopicInfo)
        assert uuid.UUID(result.physical_resource_id)
        assert result.data == {}
        assert provider.connected == []

    def test_backend_failure_get_generated_id(self, handler, msk):
        msk.tags = {}
        result = handler.handle(event("Create", topic_props(Users=USERS)))

        assert isinstance(result.error, MissingClusterConfiguration)
        assert uuid.UUID(result.physical_resource_id)
        assert result.data == {}


class TestUpdate:
    def test_echoes_physical_id(self, handler, cluster):
        cluster.add_topic(TOPIC, 3, 2, {"a": "1"})

        result = handler.handle(
            event("Update", topic_props(Config={"a": "2"}), old=topic_props(Config={"a": "1"}), physical_id=TOPIC)
        )

        assert result.ok
        assert result.physical_resource_id == TOPIC
        assert cluster.configs[TOPIC] == {"a": "2"}

    def test_failure_keeps_physical_id(self, handler, cluster):
        cluster.add_topic(TOPIC, 3, 2)

        result = handler.handle(
            event("Update", topic_props(Partitions="4"), old=topic_props(), physical_id=TOPIC)
        )

        assert not result.ok
        assert str(result.error) == "Cannot update Partitions"
        assert result.physical_resource_id == TOPIC

    def test_missing_old_properties(self, handler):
        result = handler.handle(event("Update", topic_props(), physical_id=TOPIC))
        assert isinstance(result.error, InvalidTopicInfo)


class TestDelete:
    def test_removes_users(self, handler, secret_store, cluster):
        handler.handle(event("Create", topic_props(Users=USERS)))

        result = handler.handle(event("Delete", topic_props(Users=USERS), physical_id=TOPIC))

        assert result.ok
        assert result.physical_resource_id == TOPIC
        assert secret_store.secrets == {}
        assert TOPIC in cluster.topics


def test_unknown_request_type(handler):
    result = handler.handle(event("Replace", physical_id=TOPIC))
    assert "unknown request type" in str(result.error)


def test_deadline_cancels_before_connecting(handler, clock, provider):
    result = handler.handle(event("Create"), deadline=clock.now - 1)

    assert isinstance(result.error, InvocationCancelled)
    assert provider.connected == []


def test_default_settle_waits_on_invocation_clock(msk, kms, secret_store, provider, settings, clock):
    settings = settings.model_copy(update={"settling_delay_sec": 5.0})
    handler = Handler(msk, kms, secret_store, provider, settings, clock=clock, sleeper=clock.sleep)

    result = handler.handle(event("Create", topic_props(Users=USERS)))

    assert result.ok
    assert clock.sleeps == [5.0]
