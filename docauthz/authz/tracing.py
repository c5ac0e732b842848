"""
Observability hooks for permission evaluation.

A tracer is any callable ``tracer(event, **details)``. The evaluator reports the
group and user sets it computed and every decision it reached; nothing is
reported when no tracer is installed.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional


Tracer = Callable[..., None]

USER_GROUPS = "user_groups"
READ_GROUPS = "read_groups"
READ_USERS = "read_users"
DISCOVER_GROUPS = "discover_groups"
DISCOVER_USERS = "discover_users"
DECISION = "decision"


@dataclass
class TraceEvent:
    """A single traced evaluation step."""
    event: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'event': self.event,
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


class LoggingTracer:
    """Forward trace events to a logger at DEBUG level."""

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logging.getLogger("docauthz.trace")

    def __call__(self, event: str, **details: Any) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"[ACCESS] {event}: {details}")


class MemoryTracer:
    """Record trace events in memory for tests and diagnostics."""

    def __init__(self, max_events: int = 1000):
        self.max_events = max_events
        self.events: deque = deque(maxlen=max_events)

    def __call__(self, event: str, **details: Any) -> None:
        self.events.append(TraceEvent(event=event, details=details))

    def get_events(self, event: Optional[str] = None) -> List[TraceEvent]:
        """Retrieve recorded events, optionally filtered by name."""
        if event is None:
            return list(self.events)
        return [e for e in self.events if e.event == event]

    def clear(self) -> None:
        self.events.clear()
