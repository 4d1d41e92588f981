"""OAUTHBEARER token callback for MSK IAM authentication."""
from __future__ import annotations

from typing import Callable, Tuple

from aws_msk_iam_sasl_signer import MSKAuthTokenProvider

from topic_resource.core.exceptions import MissingClusterConfiguration


def region_from_arn(cluster_arn: str) -> str:
    parts = cluster_arn.split(":")
    if len(parts) < 6 or not parts[3]:
        raise MissingClusterConfiguration(f"cannot derive region from cluster ARN {cluster_arn!r}")
    return parts[3]


def oauth_callback(region: str) -> Callable[[str], Tuple[str, float]]:
    """Build the ``oauth_cb`` confluent-kafka calls to refresh the token.

    confluent-kafka wants the expiry in seconds since the epoch; the signer
    reports milliseconds.
    """

    def _cb(_oauth_config: str) -> Tuple[str, float]:
        token, expiry_ms = MSKAuthTokenProvider.generate_auth_token(region)
        return token, expiry_ms / 1000

    return _cb
