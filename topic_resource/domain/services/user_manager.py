"""SCRAM user lifecycle: secret, optional IAM access, association and ACLs.

Every public operation is idempotent so that a retried invocation picks up
where a failed one stopped. Retriable backend errors always propagate; the
whole invocation is retried by CloudFormation.
"""
from __future__ import annotations

import base64
import json
import secrets
from typing import Callable, Iterable, List

from topic_resource.core.context import InvocationContext
from topic_resource.core.exceptions import BackendError, SecretAlreadyExists, SecretNotFound
from topic_resource.domain.models.cluster import (
    AclBinding,
    AclOperation,
    AclResourceType,
    UnprocessedScramSecret,
)
from topic_resource.domain.models.topic_info import Permission, User
from topic_resource.domain.naming import canonical_username
from topic_resource.domain.ports import ClusterAdmin, KeyManagement, MskControlPlane, SecretStore

ALREADY_ASSOCIATED = (
    "The provided secret is already associated with this cluster. "
    "To update the association, first disassociate the secret."
)
INVALID_SECRET_ARN = "The provided secret ARN is invalid."

PASSWORD_BYTES = 9


def secret_policy(principal_arn: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": principal_arn},
                    "Action": "secretsmanager:GetSecretValue",
                    "Resource": "*",
                }
            ],
        }
    )


def generate_password() -> str:
    return base64.b64encode(secrets.token_bytes(PASSWORD_BYTES)).decode("ascii").rstrip("=")


def permission_acls(topic: str, username: str, permissions: Iterable[Permission]) -> List[AclBinding]:
    """Translate *permissions* into literal ALLOW bindings for *username*.

    READ needs the consumer group grants as well; consumers may use any
    group id, hence the ``*`` group.
    """
    principal = f"User:{username}"
    perms = set(permissions)
    acls: List[AclBinding] = []
    if Permission.READ in perms:
        acls.append(AclBinding(AclResourceType.TOPIC, topic, AclOperation.READ, principal))
    if Permission.WRITE in perms:
        acls.append(AclBinding(AclResourceType.TOPIC, topic, AclOperation.WRITE, principal))
    if Permission.READ in perms:
        acls.append(AclBinding(AclResourceType.GROUP, "*", AclOperation.READ, principal))
        acls.append(AclBinding(AclResourceType.GROUP, "*", AclOperation.DESCRIBE, principal))
    return acls


class UserManager:
    """Creates and removes the credentials and grants of a single user."""

    def __init__(
        self,
        secret_store: SecretStore,
        kms: KeyManagement,
        msk: MskControlPlane,
        cluster: ClusterAdmin,
        ctx: InvocationContext,
        settle: Callable[[], None],
    ) -> None:
        self._secret_store = secret_store
        self._kms = kms
        self._msk = msk
        self._cluster = cluster
        self._ctx = ctx
        self._log = ctx.logger
        self._settle = settle

    # ------------------------------------------------------------------ #
    # Users                                                               #
    # ------------------------------------------------------------------ #
    def create_user(
        self,
        stack_suffix: str,
        topic: str,
        kms_key_id: str,
        cluster_arn: str,
        user: User,
    ) -> None:
        username = canonical_username(user.username, stack_suffix)
        secret_string = json.dumps({"username": username, "password": generate_password()})

        self._ctx.start_operation("CreateSecret", Username=user.username, KmsKeyId=kms_key_id)
        try:
            secret_arn = self._secret_store.create_secret(username, kms_key_id, secret_string)
        except SecretAlreadyExists:
            # Left behind by an earlier attempt; the password it holds is kept.
            self._ctx.retry_handled("CreateSecret", Username=user.username)
            self._ctx.start_operation("DescribeSecret", Username=username)
            secret_arn = self._secret_store.describe_secret(username)

        if user.arn:
            self._grant_secret_access(username, kms_key_id, secret_arn, user.arn)

        # The secret must be visible before MSK accepts the association.
        self._settle()

        self._ctx.start_operation("BatchAssociateScramSecret", Username=username, SecretArn=secret_arn)
        unprocessed = self._msk.batch_associate_scram_secret(cluster_arn, [secret_arn])
        for u in unprocessed:
            if u.error_message != ALREADY_ASSOCIATED:
                raise _unprocessed_error("BatchAssociateScramSecret", u)
            self._ctx.retry_handled("BatchAssociateScramSecret", Username=username)

        self._create_acls(topic, username, user.permissions)

    def delete_user(
        self,
        user: User,
        kms_key_id: str,
        topic: str,
        stack_suffix: str,
        cluster_arn: str,
    ) -> None:
        """Undo :meth:`create_user` in reverse order.

        The secret is deleted last, so a missing secret means an earlier
        attempt already finished the clean-up.
        """
        username = canonical_username(user.username, stack_suffix)
        self._delete_acls(topic, username, user.permissions)

        self._ctx.start_operation("DescribeSecret", Username=username)
        try:
            secret_arn = self._secret_store.describe_secret(username)
        except SecretNotFound:
            self._ctx.retry_handled("DescribeSecret", Username=username)
            return

        self._ctx.start_operation("BatchDisassociateScramSecret", Username=username)
        try:
            unprocessed = self._msk.batch_disassociate_scram_secret(cluster_arn, [secret_arn])
        except BackendError as exc:
            self._tolerate(exc)
        else:
            for u in unprocessed:
                if u.error_message != INVALID_SECRET_ARN:
                    raise _unprocessed_error("BatchDisassociateScramSecret", u)
                self._ctx.retry_handled("BatchDisassociateScramSecret", Username=username)

        if user.arn:
            self._revoke_grant(username, kms_key_id, user.arn)

        self._ctx.start_operation("DeleteSecret", Username=username)
        try:
            self._secret_store.delete_secret(username, force=True)
        except BackendError as exc:
            self._tolerate(exc)

    # ------------------------------------------------------------------ #
    # ACLs                                                                #
    # ------------------------------------------------------------------ #
    def create_acls(
        self, topic: str, username: str, stack_suffix: str, permissions: Iterable[Permission]
    ) -> None:
        self._create_acls(topic, canonical_username(username, stack_suffix), permissions)

    def delete_acls(
        self, topic: str, username: str, stack_suffix: str, permissions: Iterable[Permission]
    ) -> None:
        self._delete_acls(topic, canonical_username(username, stack_suffix), permissions)

    def _create_acls(self, topic: str, username: str, permissions: Iterable[Permission]) -> None:
        acls = permission_acls(topic, username, permissions)
        self._ctx.start_operation("CreateACLs", Username=username, Count=len(acls))
        self._cluster.create_acls(acls)

    def _delete_acls(self, topic: str, username: str, permissions: Iterable[Permission]) -> None:
        acls = permission_acls(topic, username, permissions)
        self._ctx.start_operation("DeleteACLs", Username=username, Count=len(acls))
        try:
            self._cluster.delete_acls(acls)
        except BackendError as exc:
            self._tolerate(exc)

    # ------------------------------------------------------------------ #
    # Helpers                                                             #
    # ------------------------------------------------------------------ #
    def _grant_secret_access(
        self, username: str, kms_key_id: str, secret_arn: str, principal_arn: str
    ) -> None:
        self._ctx.start_operation("PutResourcePolicy", Arn=principal_arn)
        self._secret_store.put_resource_policy(secret_arn, secret_policy(principal_arn))

        self._ctx.start_operation("CreateGrant", Arn=principal_arn)
        self._kms.create_grant(kms_key_id, username, principal_arn)

    def _revoke_grant(self, username: str, kms_key_id: str, principal_arn: str) -> None:
        # Grants cannot be looked up by name; an identical CreateGrant returns
        # the id of the existing grant.
        self._ctx.start_operation("CreateGrant", Arn=principal_arn)
        try:
            grant_id = self._kms.create_grant(kms_key_id, username, principal_arn)
        except BackendError as exc:
            self._tolerate(exc)
            return

        self._ctx.start_operation("RevokeGrant", GrantId=grant_id)
        try:
            self._kms.revoke_grant(kms_key_id, grant_id)
        except BackendError as exc:
            self._tolerate(exc)

    def _tolerate(self, exc: BackendError) -> None:
        """Re-raise retriable errors, log the rest and carry on."""
        if exc.retriable:
            raise exc
        self._log.error("Operation failed: %s", exc, extra={"fields": {"Operation": exc.operation}})


def _unprocessed_error(operation: str, u: UnprocessedScramSecret) -> BackendError:
    return BackendError(
        operation,
        f"failed to process secret {u.secret_arn}: {u.error_code} {u.error_message}",
        code=u.error_code,
    )
