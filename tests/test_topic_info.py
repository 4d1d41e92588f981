import pytest

from topic_resource.core.exceptions import InvalidTopicInfo
from topic_resource.domain.models.topic_info import (
    DeletionPolicy,
    Permission,
    TopicInfo,
    new_topic_info,
)

from .fakes import CLUSTER_ARN, topic_props


def test_minimal_properties():
    info = new_topic_info(topic_props())

    assert isinstance(info, TopicInfo)
    assert info.name == "orders"
    assert info.partitions == 3
    assert info.replication_factor == 2
    assert info.cluster_arn == CLUSTER_ARN
    assert info.config == {}
    assert info.users == []
    assert info.deletion_policy is DeletionPolicy.RETAIN


def test_full_properties():
    info = new_topic_info(
        topic_props(
            Config={"retention.ms": "86400000", "cleanup.policy": None},
            Users=[
                {"Username": "alice", "Permissions": ["READ", "WRITE"]},
                {"Username": "bob", "Arn": "arn:aws:iam::123456789012:role/bob", "Permissions": ["READ"]},
            ],
            DeletionPolicy="DELETE",
        )
    )

    assert info.config == {"retention.ms": "86400000", "cleanup.policy": None}
    assert [u.username for u in info.users] == ["alice", "bob"]
    assert info.users[0].arn == ""
    assert info.users[0].permissions == (Permission.READ, Permission.WRITE)
    assert info.users[1].arn == "arn:aws:iam::123456789012:role/bob"
    assert info.deletion_policy is DeletionPolicy.DELETE


def test_duplicate_permissions_collapse():
    info = new_topic_info(topic_props(Users=[{"Username": "a", "Permissions": ["READ", "READ"]}]))
    assert info.users[0].permissions == (Permission.READ,)


def test_missing_required_fields_reported_together():
    with pytest.raises(InvalidTopicInfo) as ei:
        new_topic_info({})

    fields = {v.split(":")[0] for v in ei.value.violations}
    assert {"ServiceToken", "Name", "Partitions", "ReplicationFactor", "ClusterArn"} <= fields
    assert str(ei.value) == " ".join(ei.value.violations)


def test_none_properties_are_invalid():
    with pytest.raises(InvalidTopicInfo):
        new_topic_info(None)


@pytest.mark.parametrize("value", ["1a", "abc", "-1", "1.5", "", "0"])
def test_partitions_must_be_positive_digits(value):
    with pytest.raises(InvalidTopicInfo) as ei:
        new_topic_info(topic_props(Partitions=value))
    assert ei.value.violations[0].startswith("Partitions:")


def test_unknown_property_rejected():
    with pytest.raises(InvalidTopicInfo) as ei:
        new_topic_info(topic_props(Foo="bar"))
    assert ei.value.violations[0].startswith("Foo:")


@pytest.mark.parametrize(
    "user",
    [
        {"Username": "a"},
        {"Username": "a", "Permissions": []},
        {"Username": "a", "Permissions": ["ADMIN"]},
        {"Username": "a", "Permissions": ["READ"], "Group": "x"},
    ],
)
def test_invalid_users(user):
    with pytest.raises(InvalidTopicInfo) as ei:
        new_topic_info(topic_props(Users=[user]))
    assert ei.value.violations[0].startswith("Users.0")


def test_invalid_deletion_policy():
    with pytest.raises(InvalidTopicInfo):
        new_topic_info(topic_props(DeletionPolicy="ARCHIVE"))


def test_duplicate_usernames_rejected():
    users = [
        {"Username": "a", "Permissions": ["READ"]},
        {"Username": "a", "Permissions": ["WRITE"]},
    ]
    with pytest.raises(InvalidTopicInfo) as ei:
        new_topic_info(topic_props(Users=users))
    assert "duplicate username" in str(ei.value)
    assert ei.value.violations[0].startswith("(root):")
