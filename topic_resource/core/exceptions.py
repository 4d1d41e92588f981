"""Error taxonomy shared by the reconciliation engine and its adapters.

Facades in :mod:`topic_resource.infra` translate library exceptions into
:class:`BackendError` subclasses so that the domain layer never depends on
botocore or confluent-kafka error types.
"""
from __future__ import annotations

from typing import Optional, Sequence
from uuid import uuid4

from pydantic import BaseModel, Field


class TopicResourceError(Exception):
    """Base class for every error raised by this package."""


class InvalidTopicInfo(TopicResourceError):
    """Raised when a property map does not satisfy the topic schema.

    The message is every violation joined by a single space so that a
    template author sees the whole batch in one round trip.
    """

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations = list(violations)
        super().__init__(" ".join(self.violations))


class ImmutablePropertyError(TopicResourceError):
    """Raised when an update tries to change an immutable property."""


class MissingClusterConfiguration(TopicResourceError):
    """Raised when the MSK cluster lacks configuration this resource needs."""


class InvocationCancelled(TopicResourceError):
    """Raised when the invocation deadline has passed or would pass."""


class BackendError(TopicResourceError):
    """A failed call against Kafka, MSK, KMS or Secrets Manager.

    Attributes
    ----------
    operation : str
        Backend operation name, e.g. ``CreateSecret``.
    retriable : bool
        True when the caller should retry the whole invocation.
    code : str | None
        Backend specific error code, when one is known.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        retriable: bool = False,
        code: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.retriable = retriable
        self.code = code
        super().__init__(f"{operation}: {message}")


class TopicAlreadyExists(BackendError):
    pass


class UnknownTopic(BackendError):
    pass


class SecretAlreadyExists(BackendError):
    pass


class SecretNotFound(BackendError):
    pass


def is_retriable(exc: BaseException) -> bool:
    """Classify *exc* for the external caller's retry decision."""
    if isinstance(exc, BackendError):
        return exc.retriable
    return False


class ProblemDetail(BaseModel):
    """Data model that serialises to RFC 7807 JSON.

    Attributes
    ----------
    type : str
        A URI reference that identifies the problem type.
    title : str
        A short human-readable summary of the problem type.
    status : int
        The HTTP status code.
    detail : str | None
        A human-readable explanation specific to this occurrence.
    instance : str
        A URI reference that identifies the specific occurrence.
    """

    type: str = Field(..., examples=["/invalid-topic-info"])
    title: str
    status: int = Field(..., ge=400, le=599)
    detail: Optional[str] = None
    instance: str = Field(default_factory=lambda: f"urn:uuid:{uuid4()}")
