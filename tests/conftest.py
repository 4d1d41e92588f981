import pytest

from topic_resource.core.config import Settings
from topic_resource.core.context import InvocationContext
from topic_resource.core.logging import request_logger
from topic_resource.domain.services.key_resolver import TAG_KMS_KEY, KmsKeyResolver
from topic_resource.domain.services.user_manager import UserManager

from .fakes import (
    KMS_KEY_ARN,
    STACK_ID,
    FakeClock,
    FakeClusterAdmin,
    FakeClusterAdminProvider,
    FakeKms,
    FakeMsk,
    FakeSecretStore,
    Recorder,
)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def cluster(recorder):
    return FakeClusterAdmin(recorder)


@pytest.fixture
def msk(recorder):
    return FakeMsk(recorder, tags={TAG_KMS_KEY: KMS_KEY_ARN})


@pytest.fixture
def kms(recorder):
    return FakeKms(recorder)


@pytest.fixture
def secret_store(recorder):
    return FakeSecretStore(recorder)


@pytest.fixture
def provider(cluster):
    return FakeClusterAdminProvider(cluster)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ctx(clock):
    return InvocationContext(
        logger=request_logger("tests", StackId=STACK_ID),
        clock=clock,
        sleeper=clock.sleep,
    )


@pytest.fixture
def settles(recorder):
    """Settle callback that records itself in the shared call log."""
    calls = []

    def _settle():
        calls.append(True)
        recorder.calls.append(("Settle", ()))

    _settle.calls = calls
    return _settle


@pytest.fixture
def user_manager(secret_store, kms, msk, cluster, ctx, settles):
    return UserManager(secret_store, kms, msk, cluster, ctx, settles)


@pytest.fixture
def key_resolver(msk, ctx):
    return KmsKeyResolver(msk, ctx)


@pytest.fixture
def settings():
    return Settings(_env_file=None, aws_region="us-east-1", settling_delay_sec=0)


