"""Domain models for the users API.

Nothing here is persisted: users live for a single request and the health
status is rebuilt every time it is asked for.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple

# Captured once at import; read-only afterwards.
PROCESS_STARTED_AT = time.monotonic()

HEALTHY = "healthy"


@dataclass(frozen=True)
class User:
    """A user record returned by the API."""

    id: int
    name: str
    email: str


SAMPLE_USERS: Tuple[User, ...] = (
    User(id=1, name="John Doe", email="john@example.com"),
    User(id=2, name="Jane Smith", email="jane@example.com"),
)


@dataclass(frozen=True)
class HealthStatus:
    status: str
    timestamp: datetime
    uptime: float


def process_uptime() -> float:
    """Seconds elapsed since the process started, as a float."""

    return max(0.0, time.monotonic() - PROCESS_STARTED_AT)


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""

    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def health_status() -> HealthStatus:
    return HealthStatus(
        status=HEALTHY,
        timestamp=datetime.now(timezone.utc),
        uptime=process_uptime(),
    )


__all__ = [
    "HEALTHY",
    "HealthStatus",
    "PROCESS_STARTED_AT",
    "SAMPLE_USERS",
    "User",
    "format_timestamp",
    "health_status",
    "process_uptime",
]
