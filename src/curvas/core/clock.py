from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware wall-clock time used for created/closed dates."""
    return datetime.now(timezone.utc)
