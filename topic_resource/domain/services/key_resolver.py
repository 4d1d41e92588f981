"""Resolution of the KMS key that encrypts SASL/SCRAM secrets."""
from __future__ import annotations

from topic_resource.core.context import InvocationContext
from topic_resource.core.exceptions import MissingClusterConfiguration
from topic_resource.domain.models.topic_info import TopicInfo
from topic_resource.domain.ports import MskControlPlane

TAG_KMS_KEY = "TR-KMS-KEY"


class KmsKeyResolver:
    """Reads the KMS key ARN from the MSK cluster's tags.

    The key is created and managed along with the cluster; administrators
    store its ARN under the ``TR-KMS-KEY`` tag.
    """

    def __init__(self, msk: MskControlPlane, ctx: InvocationContext) -> None:
        self._msk = msk
        self._ctx = ctx

    def resolve(self, info: TopicInfo) -> str:
        """Return the key ARN, or ``""`` when *info* declares no users."""
        if not info.users:
            return ""
        self._ctx.start_operation("DescribeCluster", ClusterArn=info.cluster_arn)
        tags = self._msk.describe_cluster_tags(info.cluster_arn)
        key = tags.get(TAG_KMS_KEY)
        if not key:
            raise MissingClusterConfiguration(
                f"MSK cluster must have a tag named {TAG_KMS_KEY} specifying the ARN "
                "of KMS key used for encrypting SASL/SCRAM credentials."
            )
        return key
