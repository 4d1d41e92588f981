"""Update: reconcile topic config and user bindings with the new state.

Name, ClusterArn, Partitions and ReplicationFactor are immutable; any change
to them fails the update before anything is mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from topic_resource.core.context import InvocationContext
from topic_resource.core.exceptions import ImmutablePropertyError, UnknownTopic
from topic_resource.domain.models.cluster import ConfigAlteration, ConfigOp
from topic_resource.domain.models.topic_info import TopicInfo
from topic_resource.domain.naming import canonical_topic_name, short_stack_id
from topic_resource.domain.ports import ClusterAdmin
from topic_resource.domain.services.key_resolver import KmsKeyResolver
from topic_resource.domain.services.user_diff import diff_users
from topic_resource.domain.services.user_manager import UserManager

ConfigMap = Mapping[str, Optional[str]]


@dataclass
class ConfigDiff:
    alterations: List[ConfigAlteration] = field(default_factory=list)
    # name -> (old desired value, current cluster value)
    skipped_deletes: Dict[str, Tuple[Optional[str], Optional[str]]] = field(default_factory=dict)


def diff_config(new: ConfigMap, old: ConfigMap, current: ConfigMap) -> ConfigDiff:
    """Three-way comparison of desired configs against the live topic.

    A key dropped from the desired state is only deleted while the cluster
    still holds the value we set; otherwise someone changed it out of band
    and it is left alone.
    """
    diff = ConfigDiff()
    for name, value in new.items():
        if name not in current:
            diff.alterations.append(ConfigAlteration(ConfigOp.APPEND, name, value))
        elif current[name] != value:
            diff.alterations.append(ConfigAlteration(ConfigOp.SET, name, value))
    for name, value in old.items():
        if name in new:
            continue
        if name in current and current[name] != value:
            diff.skipped_deletes[name] = (value, current[name])
            continue
        diff.alterations.append(ConfigAlteration(ConfigOp.DELETE, name, value))
    return diff


class UpdateTopicCommand:
    def __init__(
        self,
        cluster: ClusterAdmin,
        key_resolver: KmsKeyResolver,
        user_manager: UserManager,
        ctx: InvocationContext,
        settle: Callable[[], None],
    ) -> None:
        self._cluster = cluster
        self._key_resolver = key_resolver
        self._user_manager = user_manager
        self._ctx = ctx
        self._log = ctx.logger
        self._settle = settle

    def run(self, old: TopicInfo, new: TopicInfo, stack_id: str) -> None:
        if old.cluster_arn != new.cluster_arn:
            raise ImmutablePropertyError("Cannot update ClusterArn")

        suffix = short_stack_id(stack_id)
        topic = canonical_topic_name(new.name, suffix)

        self._ctx.start_operation("ListTopics", TopicName=topic)
        try:
            current = self._cluster.describe_topic(topic)
        except UnknownTopic:
            if old.name != new.name:
                raise ImmutablePropertyError("cannot update Name and ClusterArn properties") from None
            raise
        if current.partitions != new.partitions:
            raise ImmutablePropertyError("Cannot update Partitions")
        if current.replication_factor != new.replication_factor:
            raise ImmutablePropertyError("Cannot update ReplicationFactor")

        # Removing the last user still needs the key to revoke its grant.
        kms_key_id = self._key_resolver.resolve(new if new.users else old)

        self._ctx.start_operation("DescribeTopicConfigs", TopicName=topic)
        cdiff = diff_config(new.config, old.config, self._cluster.describe_topic_configs(topic))
        for name, (value, current_value) in cdiff.skipped_deletes.items():
            self._log.info(
                "Ignore delete because current value does not match",
                extra={"fields": {"Name": name, "Value": value, "CurrentValue": current_value}},
            )
        for a in cdiff.alterations:
            self._log.info(
                "Config update detected",
                extra={"fields": {"Name": a.name, "Op": a.op.value, "Value": a.value}},
            )
        if cdiff.alterations:
            self._ctx.start_operation("AlterTopicConfigs", TopicName=topic)
            self._cluster.alter_topic_configs(topic, cdiff.alterations)

        udiff = diff_users(old, new)

        # Deletes go first: an ARN change is a delete followed by a create of
        # the same user.
        for user in udiff.deleted_users:
            self._user_manager.delete_user(user, kms_key_id, topic, suffix, old.cluster_arn)

        # Let Secrets Manager finish the deletions before the same names are
        # created again.
        if udiff.deleted_users:
            self._settle()

        for user in udiff.added_users:
            self._user_manager.create_user(suffix, topic, kms_key_id, old.cluster_arn, user)

        for username, permissions in udiff.added_permissions.items():
            self._user_manager.create_acls(topic, username, suffix, permissions)

        for username, permissions in udiff.deleted_permissions.items():
            self._user_manager.delete_acls(topic, username, suffix, permissions)

        if udiff.is_empty():
            self._log.info("No user changes detected", extra={"fields": {"TopicName": topic}})
