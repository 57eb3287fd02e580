from typing import NewType
from datetime import datetime, timezone
from dataclasses import dataclass

from todos.domain.enums import Priority
from todos.domain.errors import TaskValidationError

TaskId = NewType("TaskId", str)


def as_utc(dt: datetime | None) -> datetime | None:
    """Data bez strefy (naive) jest traktowana jako UTC; aware zostaje bez zmian."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Task():
    """
    Model domenowy pojedynczego zadania; niemutowalny (zmiana = nowa instancja przez
    `dataclasses.replace`); ID i `created_at` nadaje TaskStore, czas w UTC.
    Daty bez strefy są przy tworzeniu oznaczane jako UTC.
    """
    task_id: TaskId
    title: str
    created_at: datetime
    is_completed: bool = False
    due_date: datetime | None = None
    priority: Priority = Priority.MEDIUM

    def __post_init__(self) -> None:
        object.__setattr__(self, "created_at", as_utc(self.created_at))
        object.__setattr__(self, "due_date", as_utc(self.due_date))

    def is_overdue(self, now: datetime) -> bool:
        return is_overdue(self, now)


def is_overdue(task: Task, now: datetime) -> bool:
    """
        Czy termin zadania minął, a zadanie nadal jest otwarte.

        Wartość wyliczana, nigdy nie zapisywana.

        :param task: Sprawdzane zadanie.
        :param now: Chwila odniesienia; naive = UTC.
        :return: True tylko gdy `due_date` jest ustawione, zadanie nie jest
            zakończone i `due_date < now`.
    """
    if task.due_date is None or task.is_completed:
        return False
    return task.due_date < as_utc(now)


def clean_title(raw: str | None) -> str:
    """
        Walidacja tytułu na granicy edycji (CLI), przed `add`/`update`.

        :raises TaskValidationError: Gdy tytuł jest pusty lub składa się z samych białych znaków.
        :return: Tytuł bez białych znaków na początku i końcu.
    """
    if not raw or not raw.strip():
        raise TaskValidationError("title", "Tytul nie moze byc pusty")
    return raw.strip()
