"""Create: topic first, then each declared user in order."""
from __future__ import annotations

from dataclasses import dataclass

from topic_resource.core.context import InvocationContext
from topic_resource.core.exceptions import TopicAlreadyExists
from topic_resource.domain.models.topic_info import TopicInfo
from topic_resource.domain.naming import canonical_topic_name, short_stack_id
from topic_resource.domain.ports import ClusterAdmin
from topic_resource.domain.services.key_resolver import KmsKeyResolver
from topic_resource.domain.services.user_manager import UserManager


@dataclass(frozen=True)
class CreateResult:
    physical_resource_id: str
    username_suffix: str


class CreateTopicCommand:
    def __init__(
        self,
        cluster: ClusterAdmin,
        key_resolver: KmsKeyResolver,
        user_manager: UserManager,
        ctx: InvocationContext,
    ) -> None:
        self._cluster = cluster
        self._key_resolver = key_resolver
        self._user_manager = user_manager
        self._ctx = ctx

    def run(self, info: TopicInfo, stack_id: str) -> CreateResult:
        kms_key_id = self._key_resolver.resolve(info)
        suffix = short_stack_id(stack_id)
        topic = canonical_topic_name(info.name, suffix)

        self._ctx.start_operation("CreateTopic", TopicName=topic)
        try:
            self._cluster.create_topic(
                topic, info.partitions, info.replication_factor, info.config
            )
        except TopicAlreadyExists:
            self._ctx.retry_handled("CreateTopic", TopicName=topic)

        for user in info.users:
            self._user_manager.create_user(suffix, topic, kms_key_id, info.cluster_arn, user)

        self._ctx.logger.info("Topic configuration successfully completed")
        return CreateResult(physical_resource_id=topic, username_suffix=suffix)
