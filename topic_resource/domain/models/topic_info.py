"""Desired state of one topic resource and the schema of its property map."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from topic_resource.core.exceptions import InvalidTopicInfo

NUMERIC_PATTERN = r"^[0-9]*$"


class Permission(str, Enum):
    READ = "READ"
    WRITE = "WRITE"


class DeletionPolicy(str, Enum):
    DELETE = "DELETE"
    RETAIN = "RETAIN"


class User(BaseModel):
    """User with access to the topic.

    ``arn`` is the IAM principal allowed to read the user's credentials from
    Secrets Manager; an empty string means no such grant.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    username: str = Field(..., alias="Username")
    arn: str = Field(default="", alias="Arn")
    permissions: tuple[Permission, ...] = Field(..., alias="Permissions", min_length=1)

    @field_validator("permissions")
    def _unique_permissions(cls, v: tuple[Permission, ...]) -> tuple[Permission, ...]:
        """Permissions behave as a set; keep declaration order."""
        return tuple(dict.fromkeys(v))


class TopicInfo(BaseModel):
    """Validated desired state, rebuilt from the property map on every event."""

    model_config = ConfigDict(frozen=True)

    name: str
    partitions: int = Field(..., ge=1)
    replication_factor: int = Field(..., ge=1)
    cluster_arn: str
    config: Dict[str, Optional[str]] = Field(default_factory=dict)
    users: List[User] = Field(default_factory=list)
    deletion_policy: DeletionPolicy = DeletionPolicy.RETAIN


class TopicProperties(BaseModel):
    """Schema of the CloudFormation ``ResourceProperties`` document."""

    model_config = ConfigDict(extra="forbid")

    service_token: str = Field(
        ..., alias="ServiceToken",
        description="ARN of the custom resource Lambda function.",
    )
    name: str = Field(
        ..., alias="Name",
        description="Topic name; a short stack hash is appended on the cluster.",
    )
    partitions: str = Field(..., alias="Partitions", pattern=NUMERIC_PATTERN)
    replication_factor: str = Field(..., alias="ReplicationFactor", pattern=NUMERIC_PATTERN)
    cluster_arn: str = Field(..., alias="ClusterArn", description="MSK cluster ARN")
    config: Dict[str, Optional[str]] = Field(
        default_factory=dict, alias="Config",
        description="Any Kafka topic property, e.g. min.insync.replicas.",
    )
    users: List[User] = Field(default_factory=list, alias="Users")
    deletion_policy: DeletionPolicy = Field(
        default=DeletionPolicy.RETAIN, alias="DeletionPolicy",
        description="What happens to the topic and its data on stack deletion.",
    )

    @field_validator("partitions", "replication_factor")
    def _positive(cls, v: str) -> str:
        if not v or int(v) < 1:
            raise ValueError("must be a positive integer")
        return v

    @model_validator(mode="after")
    def _unique_usernames(self) -> "TopicProperties":
        seen: set[str] = set()
        for u in self.users:
            if u.username in seen:
                raise ValueError(f"duplicate username {u.username!r}")
            seen.add(u.username)
        return self

    def to_topic_info(self) -> TopicInfo:
        return TopicInfo(
            name=self.name,
            partitions=int(self.partitions),
            replication_factor=int(self.replication_factor),
            cluster_arn=self.cluster_arn,
            config=dict(self.config),
            users=list(self.users),
            deletion_policy=self.deletion_policy,
        )


def _describe(error: Mapping[str, Any]) -> str:
    loc = ".".join(str(p) for p in error.get("loc", ())) or "(root)"
    return f"{loc}: {error['msg']}"


def new_topic_info(props: Optional[Mapping[str, Any]]) -> TopicInfo:
    """Validate an untyped property map and return the typed desired state.

    Raises
    ------
    InvalidTopicInfo
        With every schema violation in one message.
    """
    try:
        doc = TopicProperties.model_validate(dict(props or {}))
    except ValidationError as exc:
        raise InvalidTopicInfo([_describe(e) for e in exc.errors()]) from None
    return doc.to_topic_info()
