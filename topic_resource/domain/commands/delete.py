"""Delete: remove every user, then the topic unless it is retained."""
from __future__ import annotations

from topic_resource.core.context import InvocationContext
from topic_resource.core.exceptions import UnknownTopic
from topic_resource.domain.models.topic_info import DeletionPolicy, TopicInfo
from topic_resource.domain.naming import canonical_topic_name, short_stack_id
from topic_resource.domain.ports import ClusterAdmin
from topic_resource.domain.services.key_resolver import KmsKeyResolver
from topic_resource.domain.services.user_manager import UserManager


class DeleteTopicCommand:
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

    def run(self, info: TopicInfo, stack_id: str) -> None:
        kms_key_id = self._key_resolver.resolve(info)
        suffix = short_stack_id(stack_id)
        topic = canonical_topic_name(info.name, suffix)

        for user in info.users:
            self._user_manager.delete_user(user, kms_key_id, topic, suffix, info.cluster_arn)

        if info.deletion_policy is DeletionPolicy.RETAIN:
            self._ctx.logger.info(
                "Topic data not deleted due to deletion policy",
                extra={"fields": {"TopicName": topic}},
            )
            return

        self._ctx.start_operation("DeleteTopics", TopicName=topic)
        try:
            self._cluster.delete_topic(topic)
        except UnknownTopic:
            self._ctx.retry_handled("DeleteTopics", TopicName=topic)
