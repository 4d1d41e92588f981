"""Narrow boto3 façades for MSK, KMS and Secrets Manager."""
from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

import boto3
from botocore.config import Config

from topic_resource.core.config import Settings
from topic_resource.core.exceptions import SecretAlreadyExists, SecretNotFound
from topic_resource.domain.models.cluster import UnprocessedScramSecret
from topic_resource.infra.aws.errors import translate_errors


def boto_config(settings: Settings) -> Config:
    return Config(
        region_name=settings.aws_region,
        connect_timeout=settings.aws_connect_timeout_sec,
        read_timeout=settings.aws_read_timeout_sec,
        retries={"max_attempts": settings.aws_max_attempts, "mode": "standard"},
    )


class MskFacade:
    """MSK control plane: cluster tags, brokers and SCRAM associations."""

    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "MskFacade":
        return cls(boto3.client("kafka", config=boto_config(settings)))

    def get_bootstrap_brokers_iam(self, cluster_arn: str) -> Optional[str]:
        with translate_errors("GetBootstrapBrokers"):
            resp = self._client.get_bootstrap_brokers(ClusterArn=cluster_arn)
        return resp.get("BootstrapBrokerStringSaslIam")

    def describe_cluster_tags(self, cluster_arn: str) -> Mapping[str, str]:
        with translate_errors("DescribeCluster"):
            resp = self._client.describe_cluster(ClusterArn=cluster_arn)
        return resp.get("ClusterInfo", {}).get("Tags", {}) or {}

    def batch_associate_scram_secret(
        self, cluster_arn: str, secret_arns: Sequence[str]
    ) -> List[UnprocessedScramSecret]:
        with translate_errors("BatchAssociateScramSecret"):
            resp = self._client.batch_associate_scram_secret(
                ClusterArn=cluster_arn, SecretArnList=list(secret_arns)
            )
        return _unprocessed(resp)

    def batch_disassociate_scram_secret(
        self, cluster_arn: str, secret_arns: Sequence[str]
    ) -> List[UnprocessedScramSecret]:
        with translate_errors("BatchDisassociateScramSecret"):
            resp = self._client.batch_disassociate_scram_secret(
                ClusterArn=cluster_arn, SecretArnList=list(secret_arns)
            )
        return _unprocessed(resp)


def _unprocessed(resp: Mapping) -> List[UnprocessedScramSecret]:
    return [
        UnprocessedScramSecret(
            secret_arn=u.get("SecretArn", ""),
            error_code=u.get("ErrorCode", ""),
            error_message=u.get("ErrorMessage", ""),
        )
        for u in resp.get("UnprocessedScramSecrets", []) or []
    ]


class KmsFacade:
    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "KmsFacade":
        return cls(boto3.client("kms", config=boto_config(settings)))

    def create_grant(self, key_id: str, name: str, grantee_principal: str) -> str:
        with translate_errors("CreateGrant"):
            resp = self._client.create_grant(
                KeyId=key_id,
                Name=name,
                GranteePrincipal=grantee_principal,
                Operations=["Decrypt"],
            )
        return resp["GrantId"]

    def revoke_grant(self, key_id: str, grant_id: str) -> None:
        with translate_errors("RevokeGrant"):
            self._client.revoke_grant(KeyId=key_id, GrantId=grant_id)


class SecretsManagerFacade:
    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecretsManagerFacade":
        return cls(boto3.client("secretsmanager", config=boto_config(settings)))

    def create_secret(self, name: str, kms_key_id: str, secret_string: str) -> str:
        with translate_errors("CreateSecret", {"ResourceExistsException": SecretAlreadyExists}):
            resp = self._client.create_secret(
                Name=name, KmsKeyId=kms_key_id, SecretString=secret_string
            )
        return resp["ARN"]

    def describe_secret(self, secret_id: str) -> str:
        with translate_errors("DescribeSecret", {"ResourceNotFoundException": SecretNotFound}):
            resp = self._client.describe_secret(SecretId=secret_id)
        return resp["ARN"]

    def delete_secret(self, secret_id: str, *, force: bool = True) -> None:
        with translate_errors("DeleteSecret"):
            self._client.delete_secret(SecretId=secret_id, ForceDeleteWithoutRecovery=force)

    def put_resource_policy(self, secret_id: str, policy: str) -> None:
        with translate_errors("PutResourcePolicy"):
            self._client.put_resource_policy(SecretId=secret_id, ResourcePolicy=policy)
