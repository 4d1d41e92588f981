"""Cluster-visible names derived from a stack id and user supplied names.

Nothing here is persisted: the same (stack, raw name) pair always yields the
same canonical name, which is what makes retried invocations converge.
"""
from __future__ import annotations

import base64
import hashlib


def short_stack_id(stack_id: str) -> str:
    """First 8 chars of the unpadded base32 SHA-256 digest of *stack_id*."""
    digest = hashlib.sha256(stack_id.encode("utf-8")).digest()
    return base64.b32encode(digest).decode("ascii").rstrip("=")[:8]


def canonical_topic_name(name: str, stack_suffix: str) -> str:
    """Topic name made unique per stack.

    The same topic name used in two templates never refers to the same topic.
    """
    return f"{name}-{stack_suffix}"


def canonical_username(username: str, stack_suffix: str) -> str:
    """SCRAM username made unique per stack.

    MSK only accepts secrets prefixed with ``AmazonMSK_``. Two topics in the
    same stack declaring the same username share the user account.
    """
    return f"AmazonMSK_{username}_{stack_suffix}"
