"""Template authoring helpers: schema validation and name previews."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Path, Query
from pydantic import BaseModel

from topic_resource.domain.models.topic_info import TopicInfo, new_topic_info
from topic_resource.domain.naming import canonical_topic_name, canonical_username, short_stack_id

router = APIRouter(tags=["topics"])


class CanonicalNames(BaseModel):
    usernameSuffix: str
    topic: str | None = None
    username: str | None = None


@router.post("/topic-info/validate", response_model=TopicInfo)
def validate_topic_info(props: Dict[str, Any] = Body(...)) -> TopicInfo:
    """Validate `ResourceProperties`; violations come back as one 400 problem."""
    return new_topic_info(props)


@router.get("/stacks/{stack_id:path}/names", response_model=CanonicalNames)
def preview_names(
    stack_id: str = Path(..., description="CloudFormation stack id (ARN)"),
    topic: str | None = Query(None, description="Raw topic name"),
    username: str | None = Query(None, description="Raw username"),
) -> CanonicalNames:
    """Return the cluster-visible names this stack would use."""
    suffix = short_stack_id(stack_id)
    return CanonicalNames(
        usernameSuffix=suffix,
        topic=canonical_topic_name(topic, suffix) if topic else None,
        username=canonical_username(username, suffix) if username else None,
    )
