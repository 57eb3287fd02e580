from datetime import datetime, timezone

from todos.ports.system import Clock


class SystemClock(Clock):
    """Zegar systemowy; zwraca bieżący czas UTC (aware)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
