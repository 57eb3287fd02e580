from todos.domain.errors import TaskNotFoundError, TaskValidationError, DomainError
from todos.domain.enums import Priority
from todos.domain.task import Task, TaskId, clean_title
from todos.services.task_store import TaskStore, ids_from_view
from todos.ports.blob_store import BlobStore
from todos.adapters.memory.blob_store import InMemoryBlobStore
from todos.adapters.file.blob_store import FileBlobStore
from todos.adapters.sql.blob_store import SqlBlobStore
from todos.api.colors import TaskColor, color_priority
from todos.config import Settings, get_settings
from todos.logging_setup import setup_logging
from typer import Argument, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional
import logging


### COMMENTS
# ==========================================================
# CLI (Typer + Rich) - interfejs użytkownika listy zadań.
# ==========================================================
# Rola:
# - Mapuje komendy na operacje TaskStore (add/list/toggle/edit/rm/show).
# - Waliduje tytuł i priorytet ZANIM wywoła store (store ufa wywołującemu).
# - Numery wierszy z `list` tłumaczy na ID przed usunięciem.
# - Łapie DomainError i drukuje przyjazne komunikaty.

logger = logging.getLogger(__name__)

app = Typer(help="Todos CLI - osobista lista zadań")
console = Console()

store: TaskStore | None = None  # ustawimy w callbacku

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]


def build_blob_store(
    settings: Settings,
    file: Optional[Path] = None,
    db: Optional[str] = None,
    memory: bool = False,
) -> BlobStore:
    """Wybiera adapter trwałości.
    - `--memory` -> InMemory (bez trwałości)
    - `--file` -> plik JSON
    - `--db` -> SQL (SQLAlchemy)
    - nic -> backend z ustawień (TODOS_BACKEND)
    """
    if memory:
        return InMemoryBlobStore(namespace=settings.namespace)
    if file:
        return FileBlobStore(file, namespace=settings.namespace)
    if db:
        return SqlBlobStore(db, namespace=settings.namespace)
    if settings.backend == "memory":
        return InMemoryBlobStore(namespace=settings.namespace)
    if settings.backend == "sql":
        return SqlBlobStore(settings.db_url, namespace=settings.namespace)
    return FileBlobStore(settings.blob_path, namespace=settings.namespace)


@app.callback()
def main(
    file: Optional[Path] = Option(None, "--file", "-f", help="Ścieżka do pliku JSON z zadaniami"),
    db: Optional[str] = Option(None, "--db", help="URL bazy SQLAlchemy, np. sqlite:///todos.db"),
    memory: bool = Option(False, "--memory", help="Bez trwałości (tylko w tym procesie)"),
) -> None:
    """Bootstrap zależności na starcie procesu CLI."""
    global store
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    try:
        store = TaskStore(build_blob_store(settings, file=file, db=db, memory=memory))
    except DomainError as e:
        # np. zły URL bazy albo baza nieosiągalna przy tworzeniu tabeli
        logger.warning("Nie udało się otworzyć magazynu: %s", e)
        store = TaskStore(InMemoryBlobStore(namespace=settings.namespace))
        error_panel(e)


def short_id(task_id: str, n: int = 8) -> str:
    """Skrócona wersja UUID do wyświetlenia (pierwsze 8 znaków)."""
    return task_id[:n]


def format_due(task: Task) -> str:
    if task.due_date is None:
        return f"{TaskColor.DIM}brak{TaskColor.RESET}"
    text = task.due_date.strftime("%Y-%m-%d %H:%M")
    if store.is_overdue(task):
        return f"{TaskColor.RED}{text} (po terminie){TaskColor.RESET}"
    return text


def resolve_id(raw: str) -> TaskId:
    """
        Zamienia ID lub jego prefiks (jak w `list`) na pełne ID.

        :raises TaskNotFoundError: Gdy nic nie pasuje.
        :raises TaskValidationError: Gdy prefiks pasuje do wielu zadań.
    """
    raw = raw.strip()
    if raw and store.get(TaskId(raw)) is not None:
        return TaskId(raw)
    matches = [t.task_id for t in store.tasks if raw and t.task_id.startswith(raw)]
    if not matches:
        raise TaskNotFoundError(raw)
    if len(matches) > 1:
        raise TaskValidationError("id", f"Prefiks '{raw}' pasuje do {len(matches)} zadań")
    return matches[0]


def error_panel(e: DomainError) -> None:
    """Czerwony Panel z komunikatem błędu domenowego."""
    hint = ""
    match e:
        case TaskValidationError():
            title = "Błąd walidacji"
        case TaskNotFoundError():
            title = "Nie znaleziono"
            hint = "\n[dim]Użyj 'todos list', żeby znaleźć poprawne ID[/]"
        case _:
            title = "Błąd domenowy"
    console.print(Panel.fit(f"❌ {escape(str(e))}{hint}", title=title, border_style="red"))


def warn_if_unsaved() -> None:
    """Zmiana jest w pamięci, ale zapis się nie udał (soft failure)."""
    if not store.is_persisted:
        console.print(Panel.fit(
            f"⚠️ Zmiana NIE została zapisana: {escape(str(store.last_save_error))}\n"
            "[dim]Zostanie zapisana przy następnym udanym zapisie.[/]",
            title="Uwaga",
            border_style="yellow",
        ))


def render_view(title: str, items: list[Task]) -> None:
    """Tabela Rich: #, ID, Title, Priority, Due, Created. `#` to numer wiersza widoku (dla `rm`)."""
    table = Table(title=title, show_lines=True, header_style="bold")
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Priority", no_wrap=True)
    table.add_column("Due", no_wrap=True)
    table.add_column("Created At", no_wrap=True, style="dim")

    for position, t in enumerate(items, start=1):
        table.add_row(
            str(position),
            short_id(t.task_id),
            escape(t.title),
            color_priority(t.priority),
            format_due(t),
            t.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


def render_lists() -> None:
    active = store.active_view()
    completed = store.completed_view()
    render_view("Do zrobienia", active)
    render_view("Zakończone", completed)
    console.print(f"[dim]Aktywne: {len(active)} • Zakończone: {len(completed)}[/dim]")


@app.command("add")
def add(
    title: str,
    priority: str = Option("medium", "--priority", "-p", help="low/medium/high lub 0/1/2"),
    due: Optional[datetime] = Option(None, "--due", "-d", formats=DATE_FORMATS, help="Termin (UTC)"),
) -> None:
    """
    Dodaje nowe zadanie.

    Flow:
    - Walidacja tytułu i priorytetu (przed wywołaniem store).
    - store.add(title, priority, due_date)
    - Sukces: Panel „✅ Dodano zadanie”, pokaż skrócone ID.
    """
    try:
        task = store.add(clean_title(title), priority=Priority.parse(priority), due_date=due)
        console.print(Panel.fit(
            f"✅ Dodano zadanie\n"
            f"[cyan]ID:[/cyan] {short_id(task.task_id)}\n"
            f"[dim]Title:[/dim] {escape(task.title)}\n"
            f"[dim]Priority:[/dim] {color_priority(task.priority)}"
            + (f"\n[dim]Due:[/dim] {format_due(task)}" if task.due_date else ""),
            title="Sukces",
            border_style="green",
        ))
        warn_if_unsaved()
    except DomainError as e:
        error_panel(e)


@app.command("list")
def list_cmd() -> None:
    """Pokazuje aktywne zadania (priorytet, termin) i zakończone (najnowsze najpierw)."""
    render_lists()


@app.command("toggle")
@app.command("done")
def toggle(task_id: str) -> None:
    """
    Przełącza stan zakończenia zadania (otwarte <-> zakończone).

    Flow:
    - store.toggle_completion(resolve_id(task_id))
    - Błąd: TaskNotFoundError → „❌ Nie znaleziono… Użyj 'todos list'”.
    """
    try:
        task = store.toggle_completion(resolve_id(task_id))
        if task is None:
            raise TaskNotFoundError(task_id)
        state = f"{TaskColor.GREEN}Zakończone{TaskColor.RESET}" if task.is_completed else "Otwarte"
        console.print(Panel.fit(
            f"✅ Sukces! ID: {short_id(task.task_id)}\n[dim]Title:[/dim] {escape(task.title)}\nStatus: {state}",
            title="Sukces",
            border_style="green",
        ))
        warn_if_unsaved()
    except DomainError as e:
        error_panel(e)


@app.command("edit")
def edit(
    task_id: str,
    title: Optional[str] = Option(None, "--title", "-t"),
    priority: Optional[str] = Option(None, "--priority", "-p"),
    due: Optional[datetime] = Option(None, "--due", "-d", formats=DATE_FORMATS),
    no_due: bool = Option(False, "--no-due", help="Usuń termin"),
) -> None:
    """
    Edytuje zadanie (pełna podmiana przez store.update).

    Niepodane pola zostają bez zmian; `--no-due` usuwa termin.
    """
    try:
        current = store.get(resolve_id(task_id))
        if current is None:
            raise TaskNotFoundError(task_id)
        changed = replace(
            current,
            title=clean_title(title) if title is not None else current.title,
            priority=Priority.parse(priority) if priority is not None else current.priority,
            due_date=None if no_due else (due if due is not None else current.due_date),
        )
        if not store.update(changed):
            raise TaskNotFoundError(task_id)
        console.print(Panel.fit(
            f"✏️ Zapisano zmiany\nID: {short_id(changed.task_id)}\n[dim]Title:[/dim] {escape(changed.title)}",
            title="Sukces",
            border_style="green",
        ))
        warn_if_unsaved()
    except DomainError as e:
        error_panel(e)


@app.command("rm")
def rm(
    task_ids: Optional[List[str]] = Argument(None, help="ID (lub prefiksy) zadań"),
    active: List[int] = Option([], "--active", "-a", help="Numer wiersza z listy aktywnych"),
    completed: List[int] = Option([], "--completed", "-c", help="Numer wiersza z listy zakończonych"),
) -> None:
    """
    Usuwa zadania po ID albo po numerach wierszy z `todos list`.

    Numery wierszy są najpierw tłumaczone na ID (kolejność widoku ≠ kolejność zapisu).
    """
    try:
        ids: set[TaskId] = {resolve_id(raw) for raw in (task_ids or [])}
        if active:
            ids |= ids_from_view(store.active_view(), active)
        if completed:
            ids |= ids_from_view(store.completed_view(), completed)
        if not ids:
            raise TaskValidationError("id", "Podaj ID albo --active/--completed")

        removed = store.delete(ids)
        console.print(Panel.fit(
            f"🟡 Usunięto zadań: {removed}\n"
            + "\n".join(f"[dim]{short_id(i)}[/]" for i in sorted(ids)),
            title="Usunięto",
            border_style="yellow",
        ))
        warn_if_unsaved()
    except DomainError as e:
        error_panel(e)


@app.command("show")
def show(task_id: str) -> None:
    """
    Pokazuje szczegóły pojedynczego zadania.

    - Panel z polami: ID, Title, Priority, Due (z oznaczeniem po terminie), Created (UTC), Status
    """
    try:
        task = store.get(resolve_id(task_id))
        if task is None:
            raise TaskNotFoundError(task_id)

        status = f"{TaskColor.GREEN}Zakończone{TaskColor.RESET}" if task.is_completed else "Otwarte"
        console.print(Panel.fit(
            "\n".join([
                f"ID: {task.task_id}",
                f"Title: {escape(task.title)}",
                f"Priority: {color_priority(task.priority)}",
                f"Due: {format_due(task)}",
                f"Created: {task.created_at.isoformat()}",
                f"Status: {status}",
            ]),
            title="Szczegóły zadania",
            border_style="cyan",
        ))
    except DomainError as e:
        error_panel(e)


@app.command("demo")
def demo() -> None:
    """
    Pokazowy przebieg w jednym procesie (InMemory, bez dotykania danych użytkownika).

    - Tworzy 4 zadania z różnymi priorytetami i terminami.
    - Zamyka jedno, usuwa inne po numerze wiersza z widoku aktywnych.
    - Pokazuje listy przed i po zmianach.
    """
    global store
    store = TaskStore(InMemoryBlobStore())
    now = store.clock.now()

    console.print(Panel.fit("🚀 Start demonstracji", border_style="cyan"))

    store.add("Buy milk")
    dentist = store.add("Call dentist", priority=Priority.HIGH, due_date=now + timedelta(days=1))
    store.add("Pay rent", priority=Priority.HIGH, due_date=now - timedelta(days=1))
    store.add("Read a book", priority=Priority.LOW)

    console.print("\n📋 Lista po utworzeniu:")
    render_lists()

    store.toggle_completion(dentist.task_id)
    console.print(Panel.fit(f"✔️ Zamknięto zadanie: {short_id(dentist.task_id)} ({escape(dentist.title)})", border_style="green"))

    view = store.active_view()
    store.delete_from_view(view, [len(view)])
    console.print(Panel.fit(f"🗑️ Usunięto ostatni wiersz aktywnych: {escape(view[-1].title)}", border_style="red"))

    console.print("\n📋 Lista po zmianach:")
    render_lists()

    console.print(Panel.fit("🏁 Demo zakończone", border_style="cyan"))


if __name__ == "__main__":
    app()
