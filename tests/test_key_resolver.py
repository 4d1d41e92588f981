import pytest

from topic_resource.core.exceptions import InvocationCancelled, MissingClusterConfiguration
from topic_resource.domain.models.topic_info import new_topic_info

from .fakes import KMS_KEY_ARN, topic_props

USERS = [{"Username": "a", "Permissions": ["READ"]}]


def test_no_users_needs_no_key(key_resolver, recorder):
    assert key_resolver.resolve(new_topic_info(topic_props())) == ""
    assert recorder.calls == []


def test_key_read_from_cluster_tag(key_resolver, recorder):
    assert key_resolver.resolve(new_topic_info(topic_props(Users=USERS))) == KMS_KEY_ARN
    assert recorder.ops() == ["DescribeCluster"]


def test_missing_tag(key_resolver, msk):
    msk.tags = {"Owner": "platform"}
    with pytest.raises(MissingClusterConfiguration, match="TR-KMS-KEY"):
        key_resolver.resolve(new_topic_info(topic_props(Users=USERS)))


def test_deadline_checked_before_call(key_resolver, ctx, clock, recorder):
    ctx.deadline = clock.now
    with pytest.raises(InvocationCancelled):
        key_resolver.resolve(new_topic_info(topic_props(Users=USERS)))
    assert recorder.calls == []
