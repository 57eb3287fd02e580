from datetime import datetime, timezone
from typing import Any, Iterable
import json

from todos.domain.enums import Priority
from todos.domain.errors import PersistenceError
from todos.domain.task import Task, TaskId, as_utc

### COMMENTS
# ==========================================================
# Serializacja listy zadań do bloba (services/codec.py).
# ==========================================================
# Format: tablica JSON (UTF-8) w kolejności kanonicznej (kolejność dodania,
# NIE kolejność widoku). Każde zadanie to obiekt z jawnie nazwanymi polami:
#   id (str), title (str), is_completed (bool), created_at (ISO8601 UTC 'Z'),
#   due_date (ISO8601 UTC 'Z' lub null), priority (ranga 0/1/2).
# Brak wersji schematu: pola dodane później mają udokumentowane wartości domyślne,
# a ich brak w starym blobie nie jest błędem.


def _encode_dt(dt: datetime) -> str:
    # mikrosekundy zawsze zapisane, żeby round-trip był dokładny
    return as_utc(dt).astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _decode_dt(s: Any) -> datetime:
    """Parsuje datę ISO8601 zakończoną literą 'Z' (UTC)."""
    if not isinstance(s, str) or not s.endswith("Z"):
        raise ValueError(f"timestamp must be ISO8601 UTC with 'Z': {s!r}")
    return datetime.fromisoformat(s[:-1] + "+00:00").astimezone(timezone.utc)


def _decode_priority(raw: Any) -> Priority:
    try:
        return Priority(int(raw))
    except (TypeError, ValueError):
        return Priority.MEDIUM  # nieznana ranga z przyszłej wersji


def encode_task(task: Task) -> dict:
    return {
        "id": str(task.task_id),
        "title": task.title,
        "is_completed": task.is_completed,
        "created_at": _encode_dt(task.created_at),
        "due_date": _encode_dt(task.due_date) if task.due_date is not None else None,
        "priority": int(task.priority),
    }


def decode_task(row: dict) -> Task:
    due = row.get("due_date")
    completed = row.get("is_completed", False)
    if not isinstance(completed, bool):
        raise ValueError(f"is_completed must be a JSON bool: {completed!r}")
    return Task(
        task_id=TaskId(str(row["id"])),
        title=str(row["title"]),
        created_at=_decode_dt(row["created_at"]),
        is_completed=completed,
        due_date=_decode_dt(due) if due is not None else None,
        priority=_decode_priority(row.get("priority", Priority.MEDIUM)),
    )


def encode_tasks(tasks: Iterable[Task]) -> bytes:
    """Cała sekwencja -> bajty bloba, z zachowaniem kolejności."""
    records = [encode_task(t) for t in tasks]
    return json.dumps(records, ensure_ascii=False).encode("utf-8")


def decode_tasks(data: bytes) -> list[Task]:
    """
        Bajty bloba -> lista zadań w kolejności zapisu.

        Blob jest przyjmowany w całości albo odrzucany w całości.

        :raises PersistenceError: Gdy blob nie jest poprawnym JSON-em, nie jest listą,
            rekord nie ma wymaganych pól (`id`, `title`, `created_at`), data jest
            niepoprawna, `is_completed` nie jest bool lub ID się powtarza.
    """
    try:
        records = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        # RecursionError: bardzo głęboko zagnieżdżony JSON
        raise PersistenceError(f"uszkodzony blob: {e}") from e
    if not isinstance(records, list):
        raise PersistenceError("uszkodzony blob: oczekiwano listy zadań")

    tasks: list[Task] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise PersistenceError(f"rekord #{index}: oczekiwano obiektu")
        try:
            task = decode_task(record)
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"rekord #{index}: {e}") from e
        if task.task_id in seen:
            raise PersistenceError(f"rekord #{index}: zduplikowane id '{task.task_id}'")
        seen.add(task.task_id)
        tasks.append(task)
    return tasks
