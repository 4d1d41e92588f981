"""Capability contracts the reconciliation engine consumes.

One narrow protocol per backend so tests can substitute in-memory fakes.
Implementations raise :class:`~topic_resource.core.exceptions.BackendError`
(or one of its subclasses) and never leak library exceptions.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Protocol, Sequence

from topic_resource.domain.models.cluster import (
    AclBinding,
    ConfigAlteration,
    TopicConfigs,
    TopicDetail,
    UnprocessedScramSecret,
)


class ClusterAdmin(Protocol):
    def create_topic(
        self,
        name: str,
        partitions: int,
        replication_factor: int,
        configs: Mapping[str, Optional[str]],
    ) -> None:
        """Raises TopicAlreadyExists when the topic is already there."""

    def describe_topic(self, name: str) -> TopicDetail:
        """Raises UnknownTopic when the topic does not exist."""

    def delete_topic(self, name: str) -> None:
        """Raises UnknownTopic when the topic does not exist."""

    def describe_topic_configs(self, name: str) -> TopicConfigs: ...

    def alter_topic_configs(self, name: str, alterations: Sequence[ConfigAlteration]) -> None: ...

    def create_acls(self, acls: Iterable[AclBinding]) -> None: ...

    def delete_acls(self, acls: Iterable[AclBinding]) -> None: ...


class ClusterAdminProvider(Protocol):
    def connect(self, cluster_arn: str) -> ClusterAdmin: ...


class MskControlPlane(Protocol):
    def get_bootstrap_brokers_iam(self, cluster_arn: str) -> Optional[str]: ...

    def describe_cluster_tags(self, cluster_arn: str) -> Mapping[str, str]: ...

    def batch_associate_scram_secret(
        self, cluster_arn: str, secret_arns: Sequence[str]
    ) -> List[UnprocessedScramSecret]: ...

    def batch_disassociate_scram_secret(
        self, cluster_arn: str, secret_arns: Sequence[str]
    ) -> List[UnprocessedScramSecret]: ...


class KeyManagement(Protocol):
    def create_grant(self, key_id: str, name: str, grantee_principal: str) -> str:
        """Create a Decrypt grant and return its id."""

    def revoke_grant(self, key_id: str, grant_id: str) -> None: ...


class SecretStore(Protocol):
    def create_secret(self, name: str, kms_key_id: str, secret_string: str) -> str:
        """Return the new secret's ARN; raises SecretAlreadyExists."""

    def describe_secret(self, secret_id: str) -> str:
        """Return the secret's ARN; raises SecretNotFound."""

    def delete_secret(self, secret_id: str, *, force: bool = True) -> None: ...

    def put_resource_policy(self, secret_id: str, policy: str) -> None: ...
