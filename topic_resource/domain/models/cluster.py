"""Value objects exchanged with the cluster admin port."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class AclResourceType(str, Enum):
    TOPIC = "TOPIC"
    GROUP = "GROUP"


class AclOperation(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    DESCRIBE = "DESCRIBE"


@dataclass(frozen=True)
class AclBinding:
    """An ALLOW grant on a literal resource pattern."""

    resource_type: AclResourceType
    resource_name: str
    operation: AclOperation
    principal: str
    host: str = "*"


class ConfigOp(str, Enum):
    SET = "SET"
    APPEND = "APPEND"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ConfigAlteration:
    op: ConfigOp
    name: str
    value: Optional[str]


@dataclass(frozen=True)
class TopicDetail:
    """Partition layout of an existing topic."""

    name: str
    partitions: int
    replication_factor: int


TopicConfigs = Dict[str, Optional[str]]


@dataclass(frozen=True)
class UnprocessedScramSecret:
    """A secret MSK refused to (dis)associate, as reported by the batch API."""

    secret_arn: str
    error_code: str
    error_message: str
