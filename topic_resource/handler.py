"""Dispatch of lifecycle events to the Create/Update/Delete commands.

A :class:`Handler` owns the long-lived backend clients; everything built in
:meth:`Handler.handle` (logger, deadline, cluster connection, commands)
lives for one invocation only.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from topic_resource.core.config import Settings
from topic_resource.core.context import Clock, InvocationContext, Sleeper
from topic_resource.core.exceptions import TopicResourceError, is_retriable
from topic_resource.core.logging import request_logger
from topic_resource.domain.commands.create import CreateTopicCommand
from topic_resource.domain.commands.delete import DeleteTopicCommand
from topic_resource.domain.commands.update import UpdateTopicCommand
from topic_resource.domain.models.topic_info import TopicInfo, new_topic_info
from topic_resource.domain.ports import (
    ClusterAdmin,
    ClusterAdminProvider,
    KeyManagement,
    MskControlPlane,
    SecretStore,
)
from topic_resource.domain.services.key_resolver import KmsKeyResolver
from topic_resource.domain.services.user_manager import UserManager
from topic_resource.models.events import LifecycleEvent, RequestType

PROP_USERNAME_SUFFIX = "UsernameSuffix"


@dataclass
class HandlerResult:
    physical_resource_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Handler:
    """Entry point for custom resource events managed by this package."""

    def __init__(
        self,
        msk: MskControlPlane,
        kms: KeyManagement,
        secret_store: SecretStore,
        admin_provider: ClusterAdminProvider,
        settings: Settings,
        *,
        settle: Optional[Callable[[], None]] = None,
        clock: Clock = time.monotonic,
        sleeper: Sleeper = time.sleep,
    ) -> None:
        self._msk = msk
        self._kms = kms
        self._secret_store = secret_store
        self._admin_provider = admin_provider
        self._settings = settings
        self._settle = settle
        self._clock = clock
        self._sleeper = sleeper

    def handle(self, event: LifecycleEvent, *, deadline: Optional[float] = None) -> HandlerResult:
        """Run *event* to completion and describe the outcome.

        ``deadline`` is an absolute value of the handler's clock after which
        no further backend call is started.
        """
        log = request_logger(
            __name__,
            StackId=event.stack_id,
            LogicalResourceId=event.logical_resource_id,
            PhysicalResourceId=event.physical_resource_id,
            RequestId=event.request_id,
            ResourceType=event.resource_type,
            RequestType=event.request_type,
        )
        ctx = InvocationContext(logger=log, deadline=deadline, clock=self._clock, sleeper=self._sleeper)
        log.info(
            "Start",
            extra={
                "fields": {
                    "ResourceProperties": event.resource_properties,
                    "OldResourceProperties": event.old_resource_properties,
                }
            },
        )

        # CloudFormation needs a PhysicalResourceId even when create fails.
        if event.request_type == RequestType.CREATE.value:
            result = HandlerResult(physical_resource_id=str(uuid4()))
        else:
            result = HandlerResult(physical_resource_id=event.physical_resource_id)

        try:
            if event.request_type == RequestType.CREATE.value:
                self._create(event, ctx, result)
            elif event.request_type == RequestType.UPDATE.value:
                self._update(event, ctx)
            elif event.request_type == RequestType.DELETE.value:
                self._delete(event, ctx)
            else:
                raise TopicResourceError(f"unknown request type: {event.request_type}")
        except Exception as exc:  # reported to CloudFormation, never raised
            log.error(
                "Failed to process request: %s",
                exc,
                exc_info=not isinstance(exc, TopicResourceError),
                extra={"fields": {"Retriable": is_retriable(exc)}},
            )
            result.error = exc
            result.data = {}
        else:
            log.info("Request completed", extra={"fields": {"PhysicalResourceId": result.physical_resource_id}})
        return result

    # ------------------------------------------------------------------ #
    # Per request type                                                    #
    # ------------------------------------------------------------------ #
    def _create(self, event: LifecycleEvent, ctx: InvocationContext, result: HandlerResult) -> None:
        info = new_topic_info(event.resource_properties)
        cluster = self._connect(info, ctx)
        cmd = CreateTopicCommand(cluster, KmsKeyResolver(self._msk, ctx), self._user_manager(cluster, ctx), ctx)
        created = cmd.run(info, event.stack_id)
        result.physical_resource_id = created.physical_resource_id
        result.data[PROP_USERNAME_SUFFIX] = created.username_suffix

    def _update(self, event: LifecycleEvent, ctx: InvocationContext) -> None:
        old = new_topic_info(event.old_resource_properties)
        new = new_topic_info(event.resource_properties)
        cluster = self._connect(old, ctx)
        cmd = UpdateTopicCommand(
            cluster,
            KmsKeyResolver(self._msk, ctx),
            self._user_manager(cluster, ctx),
            ctx,
            self._settle_for(ctx),
        )
        cmd.run(old, new, event.stack_id)

    def _delete(self, event: LifecycleEvent, ctx: InvocationContext) -> None:
        info = new_topic_info(event.resource_properties)
        cluster = self._connect(info, ctx)
        cmd = DeleteTopicCommand(cluster, KmsKeyResolver(self._msk, ctx), self._user_manager(cluster, ctx), ctx)
        cmd.run(info, event.stack_id)

    # ------------------------------------------------------------------ #
    # Wiring                                                              #
    # ------------------------------------------------------------------ #
    def _connect(self, info: TopicInfo, ctx: InvocationContext) -> ClusterAdmin:
        ctx.start_operation("GetBootstrapBrokers", ClusterArn=info.cluster_arn)
        return self._admin_provider.connect(info.cluster_arn)

    def _settle_for(self, ctx: InvocationContext) -> Callable[[], None]:
        if self._settle is not None:
            return self._settle
        return lambda: ctx.wait(self._settings.settling_delay_sec)

    def _user_manager(self, cluster: ClusterAdmin, ctx: InvocationContext) -> UserManager:
        return UserManager(
            self._secret_store,
            self._kms,
            self._msk,
            cluster,
            ctx,
            self._settle_for(ctx),
        )
