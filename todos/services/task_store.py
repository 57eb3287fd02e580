from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Sequence
import logging
import threading

from todos.adapters.system.clock_system import SystemClock
from todos.adapters.system.id_provider_uuid import UuidIdProvider
from todos.domain.enums import Priority
from todos.domain.errors import PersistenceError, TaskValidationError
from todos.domain.task import Task, TaskId, is_overdue
from todos.ports.blob_store import BlobStore
from todos.ports.system import Clock, IdProvider
from todos.services.codec import decode_tasks, encode_tasks

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


### COMMENTS
# ==========================================================
# Magazyn zadań (services/task_store.py) - jedyne źródło prawdy.
# ==========================================================
# Rola:
# - Trzyma listę zadań w kolejności kanonicznej (kolejność dodania).
# - CRUD po ID; widoki (aktywne / zakończone) liczone na żądanie, bez cache.
# - Write-through: po każdej zmianie cała lista idzie do BlobStore.save().
#
# Zasady:
# - Nieznane ID w toggle/update/delete to no-op (bez wyjątku, bez zapisu).
# - Błąd zapisu NIE cofa zmiany w pamięci; trafia do `last_save_error` i logów.
# - Błąd odczytu / uszkodzony blob = start z pustą listą.
# - Tytułu nie walidujemy tutaj; robi to wywołujący (`clean_title`).
# - Jeden pisarz naraz: wszystkie operacje pod jednym RLock.


def active_sort_key(task: Task) -> tuple:
    """
        Klucz porządku widoku aktywnych zadań (jeden spójny klucz, porządek totalny).

        1. wyższy priorytet najpierw,
        2. zadanie z terminem przed zadaniem bez terminu,
        3. wcześniejszy termin najpierw,
        4. wcześniejsze `created_at` najpierw,
        5. tiebreaker po `task_id` (ASC) dla stabilności.
    """
    has_due = task.due_date is not None
    return (
        -int(task.priority),
        0 if has_due else 1,
        task.due_date if has_due else task.created_at,
        task.created_at,
        str(task.task_id),
    )


def completed_sort_key(task: Task) -> tuple:
    # created_at malejąco; mikrosekundy od epoki, bo datetime nie ma negacji
    micros = (task.created_at - _EPOCH) // timedelta(microseconds=1)
    return (-micros, str(task.task_id))


def ids_from_view(view: Sequence[Task], positions: Iterable[int]) -> set[TaskId]:
    """
        Tłumaczy numery wierszy widoku (od 1) na ID zadań.

        Usuwanie "wiersza 2 z aktywnych" musi przejść przez ID, bo kolejność
        widoku jest inna niż kolejność kanoniczna.

        :raises TaskValidationError: Gdy numer wiersza jest spoza widoku.
    """
    ids: set[TaskId] = set()
    for position in positions:
        if position < 1 or position > len(view):
            raise TaskValidationError("position", f"Brak wiersza {position} (widok ma {len(view)})")
        ids.add(view[position - 1].task_id)
    return ids


class TaskStore:
    """
    Magazyn zadań z zapisem write-through do portu `BlobStore`.

    :param blob_store: Implementacja portu BlobStore (plik, SQL, pamięć).
    :param id_provider: Źródło ID (domyślnie UUID v4).
    :param clock: Źródło czasu (domyślnie zegar systemowy UTC).
    """
    def __init__(
        self,
        blob_store: BlobStore,
        id_provider: IdProvider | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.blob_store = blob_store
        self.id_provider = id_provider or UuidIdProvider()
        self.clock = clock or SystemClock()
        self.last_save_error: PersistenceError | None = None
        self._tasks: list[Task] = []
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self.reload()

    # ---- persistence ----

    def reload(self) -> None:
        """Wczytuje listę z BlobStore; brak danych lub błąd = pusta lista."""
        with self._lock:
            try:
                data = self.blob_store.load()
                self._tasks = decode_tasks(data) if data is not None else []
            except PersistenceError as e:
                logger.warning(
                    "Nie udało się wczytać zadań (namespace=%s), start z pustą listą: %s",
                    self.blob_store.namespace,
                    e,
                )
                self._tasks = []
            logger.info("TaskStore gotowy namespace=%s total=%d", self.blob_store.namespace, len(self._tasks))

    def _commit(self, action: str) -> None:
        """Zapis całej listy + powiadomienie subskrybentów."""
        try:
            self.blob_store.save(encode_tasks(self._tasks))
        except PersistenceError as e:
            self.last_save_error = e
            logger.warning("Zapis po '%s' nie powiódł się; zmiana zostaje w pamięci", action, exc_info=True)
        else:
            self.last_save_error = None
        logger.debug("%s total=%d persisted=%s", action, len(self._tasks), self.is_persisted)
        self._notify()

    @property
    def is_persisted(self) -> bool:
        """False, gdy ostatni zapis się nie powiódł (stan w pamięci jest nowszy niż na dysku)."""
        return self.last_save_error is None

    # ---- notifications ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
            Rejestruje słuchacza wołanego po każdej zatwierdzonej zmianie.

            :return: Funkcja wyrejestrowująca słuchacza.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Słuchacz zmian %r rzucił wyjątek", listener)

    # ---- queries ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Migawka listy w kolejności kanonicznej."""
        with self._lock:
            return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: TaskId) -> Task | None:
        with self._lock:
            for task in self._tasks:
                if task.task_id == task_id:
                    return task
            return None

    def active_view(self) -> list[Task]:
        """Zadania niezakończone, posortowane kluczem `active_sort_key`."""
        with self._lock:
            return sorted((t for t in self._tasks if not t.is_completed), key=active_sort_key)

    def completed_view(self) -> list[Task]:
        """Zadania zakończone, najnowsze (po `created_at`) najpierw."""
        with self._lock:
            return sorted((t for t in self._tasks if t.is_completed), key=completed_sort_key)

    def is_overdue(self, task: Task, now: datetime | None = None) -> bool:
        return is_overdue(task, now or self.clock.now())

    # ---- mutations ----

    def _index_of(self, task_id: TaskId) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.task_id == task_id:
                return index
        return None

    def add(self, title: str, priority: Priority = Priority.MEDIUM, due_date: datetime | None = None) -> Task:
        """
            Tworzy nowe zadanie na końcu listy i zapisuje listę.

            - `task_id` z `id_provider`, `created_at` z `clock`.
            - Tytuł musi być już zwalidowany przez wywołującego.

            :return: Utworzony obiekt `Task` (także gdy zapis się nie powiódł).
        """
        with self._lock:
            task = Task(
                task_id=self.id_provider.new_id(),
                title=title,
                created_at=self.clock.now(),
                due_date=due_date,
                priority=Priority(priority),
            )
            self._tasks.append(task)
            self._commit(f"add {task.task_id}")
            return task

    def toggle_completion(self, task_id: TaskId) -> Task | None:
        """
            Odwraca `is_completed` zadania o podanym ID.

            :return: Zaktualizowane zadanie albo `None`, gdy ID nie istnieje (no-op).
        """
        with self._lock:
            index = self._index_of(task_id)
            if index is None:
                logger.debug("toggle: brak zadania %s, pomijam", task_id)
                return None
            toggled = replace(self._tasks[index], is_completed=not self._tasks[index].is_completed)
            self._tasks[index] = toggled
            self._commit(f"toggle {task_id}")
            return toggled

    def update(self, task: Task) -> bool:
        """
            Pełna podmiana zadania o `task.task_id` (w tym samym miejscu listy).

            Nie wstawia nowych zadań.

            :return: True, gdy zadanie istniało i zostało podmienione.
        """
        with self._lock:
            index = self._index_of(task.task_id)
            if index is None:
                logger.debug("update: brak zadania %s, pomijam", task.task_id)
                return False
            self._tasks[index] = task
            self._commit(f"update {task.task_id}")
            return True

    def delete(self, ids: Iterable[TaskId]) -> int:
        """
            Usuwa wszystkie zadania, których ID jest w `ids`.

            Nieznane ID są ignorowane; znane i tak zostają usunięte.

            :return: Liczba usuniętych zadań.
        """
        with self._lock:
            doomed = set(ids)
            kept = [t for t in self._tasks if t.task_id not in doomed]
            removed = len(self._tasks) - len(kept)
            if removed:
                self._tasks = kept
                self._commit(f"delete {removed}")
            return removed

    def delete_from_view(self, view: Sequence[Task], positions: Iterable[int]) -> int:
        """Usuwa wiersze (od 1) wskazane w widoku, po przetłumaczeniu ich na ID."""
        with self._lock:
            return self.delete(ids_from_view(view, positions))
