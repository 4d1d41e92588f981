"""Construction of the production Handler from settings."""
from __future__ import annotations

from functools import lru_cache

from topic_resource.core.config import Settings, get_settings
from topic_resource.handler import Handler
from topic_resource.infra.aws.clients import KmsFacade, MskFacade, SecretsManagerFacade
from topic_resource.infra.kafka.admin import IamClusterAdminProvider


def build_handler(settings: Settings) -> Handler:
    """Create boto3-backed collaborators and inject them into a Handler."""
    msk = MskFacade.from_settings(settings)
    return Handler(
        msk=msk,
        kms=KmsFacade.from_settings(settings),
        secret_store=SecretsManagerFacade.from_settings(settings),
        admin_provider=IamClusterAdminProvider(msk, settings),
        settings=settings,
    )


@lru_cache
def get_handler() -> Handler:
    """Return a cached Handler so warm invocations reuse AWS connections."""
    return build_handler(get_settings())  # pragma: no cover
