"""Translation of botocore failures into the package's error taxonomy."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, Type

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from topic_resource.core.exceptions import BackendError

# Codes AWS returns with a 4xx status that still warrant a retry.
RETRIABLE_CODES = frozenset(
    {
        "ThrottlingException",
        "TooManyRequestsException",
        "RequestLimitExceeded",
        "LimitExceededException",
        "InternalServiceError",
        "InternalFailure",
        "ServiceUnavailableException",
    }
)

# Transport failures; every other BotoCoreError (e.g. parameter validation)
# fails the same way on retry.
TRANSIENT_ERRORS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)


def is_retriable_client_error(exc: ClientError) -> bool:
    code = exc.response.get("Error", {}).get("Code", "")
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0) or 0
    return status >= 500 or code in RETRIABLE_CODES


@contextmanager
def translate_errors(
    operation: str, known: Dict[str, Type[BackendError]] | None = None
) -> Iterator[None]:
    """Re-raise botocore errors from the block as :class:`BackendError`.

    ``known`` maps AWS error codes to the subclass to raise for them.
    Connection failures and timeouts are retriable; other client-side
    errors are not.
    """
    try:
        yield
    except ClientError as exc:
        code = exc.response.get("Error", {}).get("Code", "")
        message = exc.response.get("Error", {}).get("Message", str(exc))
        cls = (known or {}).get(code, BackendError)
        raise cls(operation, message, retriable=is_retriable_client_error(exc), code=code) from exc
    except BotoCoreError as exc:
        raise BackendError(
            operation, str(exc), retriable=isinstance(exc, TRANSIENT_ERRORS)
        ) from exc
