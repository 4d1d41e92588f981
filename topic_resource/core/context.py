"""Per-invocation state: request logger and deadline."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from topic_resource.core.exceptions import InvocationCancelled
from topic_resource.core.logging import RequestLoggerAdapter

Clock = Callable[[], float]
Sleeper = Callable[[float], None]


@dataclass
class InvocationContext:
    """Everything that lives exactly as long as one lifecycle event.

    ``deadline`` is an absolute value of ``clock``; ``None`` means no limit.
    """

    logger: RequestLoggerAdapter
    deadline: Optional[float] = None
    clock: Clock = field(default=time.monotonic)
    sleeper: Sleeper = field(default=time.sleep)

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return self.deadline - self.clock()

    def ensure_active(self) -> None:
        """Raise InvocationCancelled once the deadline has passed."""
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise InvocationCancelled("invocation deadline exceeded")

    def wait(self, seconds: float) -> None:
        """Block for *seconds* unless that would run past the deadline."""
        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            raise InvocationCancelled(
                f"not enough time left to wait {seconds:.0f}s for the secret store to settle"
            )
        self.sleeper(seconds)

    def start_operation(self, name: str, **fields: Any) -> None:
        """Log the start of a backend call and check the deadline first."""
        self.ensure_active()
        self.logger.info("Start operation %s", name, extra={"fields": fields})

    def retry_handled(self, operation: str, **fields: Any) -> None:
        self.logger.info("Retry handled for %s", operation, extra={"fields": fields})
