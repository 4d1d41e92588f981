"""Global reusable FastAPI dependencies."""
from topic_resource.factory import get_handler
from topic_resource.handler import Handler


def handler_dependency() -> Handler:
    """Return the process-wide Handler; overridden in tests."""
    return get_handler()
