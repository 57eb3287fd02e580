from typing import Protocol
from datetime import datetime

from todos.domain.task import TaskId


class Clock(Protocol):
    """Źródło bieżącego czasu dla `created_at` i `is_overdue`; zawsze UTC (aware)."""

    def now(self) -> datetime:
        ...


class IdProvider(Protocol):
    """Generuje unikalne ID zadań; raz wydane ID nie wraca do obiegu."""

    def new_id(self) -> TaskId:
        ...
