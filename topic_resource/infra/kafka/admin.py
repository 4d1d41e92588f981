"""Kafka Admin façade built on confluent-kafka."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from confluent_kafka import KafkaError, KafkaException, TopicCollection
from confluent_kafka.admin import (
    AclBinding as KafkaAclBinding,
    AclBindingFilter,
    AclOperation as KafkaAclOperation,
    AclPermissionType,
    AdminClient,
    AlterConfigOpType,
    ConfigEntry,
    ConfigResource,
    NewTopic,
    ResourcePatternType,
    ResourceType,
)

from topic_resource.core.config import Settings
from topic_resource.core.exceptions import (
    BackendError,
    MissingClusterConfiguration,
    TopicAlreadyExists,
    UnknownTopic,
)
from topic_resource.domain.models.cluster import (
    AclBinding,
    AclOperation,
    AclResourceType,
    ConfigAlteration,
    ConfigOp,
    TopicConfigs,
    TopicDetail,
)
from topic_resource.domain.ports import MskControlPlane
from topic_resource.infra.aws.msk_iam import oauth_callback, region_from_arn

# librdkafka local errors that mean "try again later"
_TRANSIENT = {
    KafkaError._TIMED_OUT,
    KafkaError._TRANSPORT,
    KafkaError._ALL_BROKERS_DOWN,
}

_RESOURCE_TYPES = {
    AclResourceType.TOPIC: ResourceType.TOPIC,
    AclResourceType.GROUP: ResourceType.GROUP,
}

_OPERATIONS = {
    AclOperation.READ: KafkaAclOperation.READ,
    AclOperation.WRITE: KafkaAclOperation.WRITE,
    AclOperation.DESCRIBE: KafkaAclOperation.DESCRIBE,
}

_CONFIG_OPS = {
    ConfigOp.SET: AlterConfigOpType.SET,
    ConfigOp.APPEND: AlterConfigOpType.APPEND,
    ConfigOp.DELETE: AlterConfigOpType.DELETE,
}


def translate_kafka_error(operation: str, exc: Exception) -> BackendError:
    """Map a confluent-kafka failure to the package's error taxonomy."""
    err = exc.args[0] if isinstance(exc, KafkaException) and exc.args else None
    if not isinstance(err, KafkaError):
        return BackendError(operation, str(exc), retriable=False)
    code = err.code()
    retriable = bool(err.retriable()) or code in _TRANSIENT
    if code == KafkaError.TOPIC_ALREADY_EXISTS:
        cls = TopicAlreadyExists
    elif code == KafkaError.UNKNOWN_TOPIC_OR_PART:
        cls = UnknownTopic
    else:
        cls = BackendError
    return cls(operation, err.str(), retriable=retriable, code=err.name())


class KafkaAdminFacade:
    """Encapsulates admin operations against a Kafka cluster."""

    def __init__(self, client: AdminClient, request_timeout_sec: float = 20.0) -> None:
        self._client = client
        self._timeout = request_timeout_sec

    def _wait(self, operation: str, futures: Mapping) -> Dict:
        results = {}
        for key, fut in futures.items():
            try:
                results[key] = fut.result()
            except KafkaException as exc:
                raise translate_kafka_error(operation, exc) from exc
        return results

    # ---------- Topics -------------------------------------------------

    def create_topic(
        self,
        name: str,
        partitions: int,
        replication_factor: int,
        configs: Mapping[str, Optional[str]],
    ) -> None:
        new_topic = NewTopic(
            name,
            num_partitions=partitions,
            replication_factor=replication_factor,
            # null means "broker default"
            config={k: v for k, v in configs.items() if v is not None},
        )
        futures = self._client.create_topics([new_topic], request_timeout=self._timeout)
        self._wait("CreateTopic", futures)

    def describe_topic(self, name: str) -> TopicDetail:
        futures = self._client.describe_topics(
            TopicCollection([name]), request_timeout=self._timeout
        )
        desc = self._wait("ListTopics", futures)[name]
        partitions = desc.partitions or []
        rf = len(partitions[0].replicas) if partitions else 0
        return TopicDetail(name=name, partitions=len(partitions), replication_factor=rf)

    def delete_topic(self, name: str) -> None:
        futures = self._client.delete_topics([name], request_timeout=self._timeout)
        self._wait("DeleteTopics", futures)

    # ---------- Configs ------------------------------------------------

    def describe_topic_configs(self, name: str) -> TopicConfigs:
        resource = ConfigResource(ResourceType.TOPIC, name)
        futures = self._client.describe_configs([resource], request_timeout=self._timeout)
        entries = next(iter(self._wait("DescribeTopicConfigs", futures).values()))
        return {k: e.value for k, e in entries.items()}

    def alter_topic_configs(self, name: str, alterations: Sequence[ConfigAlteration]) -> None:
        resource = ConfigResource(
            ResourceType.TOPIC,
            name,
            incremental_configs=[
                ConfigEntry(a.name, a.value, incremental_operation=_CONFIG_OPS[a.op])
                for a in alterations
            ],
        )
        futures = self._client.incremental_alter_configs([resource], request_timeout=self._timeout)
        self._wait("AlterTopicConfigs", futures)

    # ---------- ACLs ---------------------------------------------------

    def create_acls(self, acls: Iterable[AclBinding]) -> None:
        bindings = [
            KafkaAclBinding(
                _RESOURCE_TYPES[a.resource_type],
                a.resource_name,
                ResourcePatternType.LITERAL,
                a.principal,
                a.host,
                _OPERATIONS[a.operation],
                AclPermissionType.ALLOW,
            )
            for a in acls
        ]
        if not bindings:
            return
        futures = self._client.create_acls(bindings, request_timeout=self._timeout)
        self._wait("CreateACLs", futures)

    def delete_acls(self, acls: Iterable[AclBinding]) -> None:
        """Delete every binding; report the first retriable failure, if any.

        Non-retriable failures do not stop the remaining deletions and are
        reported together afterwards.
        """
        filters = [
            AclBindingFilter(
                _RESOURCE_TYPES[a.resource_type],
                a.resource_name,
                ResourcePatternType.LITERAL,
                a.principal,
                a.host,
                _OPERATIONS[a.operation],
                AclPermissionType.ALLOW,
            )
            for a in acls
        ]
        if not filters:
            return
        try:
            futures = self._client.delete_acls(filters, request_timeout=self._timeout)
        except KafkaException as exc:
            raise translate_kafka_error("DeleteACLs", exc) from exc

        failures: List[BackendError] = []
        for fut in futures.values():
            try:
                fut.result()
            except KafkaException as exc:
                err = translate_kafka_error("DeleteACLs", exc)
                if err.retriable:
                    raise err from exc
                failures.append(err)
        if failures:
            raise BackendError(
                "DeleteACLs", "; ".join(str(f) for f in failures), retriable=False
            )


class IamClusterAdminProvider:
    """Opens an admin client for an MSK cluster using IAM authentication."""

    def __init__(self, msk: MskControlPlane, settings: Settings) -> None:
        self._msk = msk
        self._settings = settings

    def connect(self, cluster_arn: str) -> KafkaAdminFacade:
        brokers = self._msk.get_bootstrap_brokers_iam(cluster_arn)
        if not brokers:
            raise MissingClusterConfiguration(
                "MSK cluster does not have IAM authentication enabled. IAM authentication "
                "must be enabled before managing topics using this custom resource."
            )
        s = self._settings
        conf = {
            "bootstrap.servers": brokers,
            "client.id": s.kafka_client_id,
            "security.protocol": s.kafka_security_protocol,
            "sasl.mechanisms": s.kafka_sasl_mechanism,
            "socket.timeout.ms": s.request_timeout_ms,
        }
        if s.kafka_sasl_mechanism == "OAUTHBEARER":
            conf["oauth_cb"] = oauth_callback(region_from_arn(cluster_arn))
        if s.kafka_api_version:
            conf["broker.version.fallback"] = s.kafka_api_version
        return KafkaAdminFacade(AdminClient(conf), request_timeout_sec=s.request_timeout_ms / 1000)
