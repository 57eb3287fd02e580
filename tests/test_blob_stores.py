import pytest
from pathlib import Path
from todos.adapters.file.blob_store import FileBlobStore
from todos.adapters.sql.blob_store import SqlBlobStore
from todos.adapters.memory.blob_store import InMemoryBlobStore
from todos.domain.errors import PersistenceError
from todos.ports.blob_store import DEFAULT_NAMESPACE
from todos.services.task_store import TaskStore


@pytest.fixture
def file_store(tmp_path):
    """Plik w świeżym katalogu tymczasowym (katalog nadrzędny jeszcze nie istnieje)."""
    return FileBlobStore(tmp_path / "data" / "todos.json")


@pytest.fixture
def sql_store(tmp_path):
    """Magazyn na świeżej tymczasowej bazie SQLite."""
    store = SqlBlobStore(tmp_path / "todos.db")
    yield store
    store.dispose()


@pytest.fixture(params=["memory", "file", "sql"])
def any_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryBlobStore()
    elif request.param == "file":
        yield FileBlobStore(tmp_path / "todos.json")
    else:
        store = SqlBlobStore(tmp_path / "todos.db")
        yield store
        store.dispose()


def test_load_before_first_save_returns_none(any_store):
    assert any_store.load() is None


def test_save_then_load_returns_same_bytes(any_store):
    any_store.save(b'[{"id": "a"}]')

    assert any_store.load() == b'[{"id": "a"}]'


def test_save_overwrites_previous_blob(any_store):
    any_store.save(b"first")
    any_store.save(b"second")

    assert any_store.load() == b"second"


def test_default_namespace(any_store):
    assert any_store.namespace == DEFAULT_NAMESPACE


def test_file_store_leaves_no_swap_file(file_store):
    file_store.save(b"[]")

    assert file_store.path.read_bytes() == b"[]"
    assert [p.name for p in file_store.path.parent.iterdir()] == ["todos.json"]


def test_file_store_write_failure_raises_and_keeps_old_blob(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = FileBlobStore(blocker / "todos.json")

    with pytest.raises(PersistenceError):
        store.save(b"[]")
    assert blocker.read_text() == "not a directory"


def test_file_store_unreadable_path_raises(tmp_path):
    store = FileBlobStore(tmp_path)  # katalog zamiast pliku

    with pytest.raises(PersistenceError):
        store.load()


def test_sql_store_namespaces_are_independent(tmp_path):
    db_path = tmp_path / "todos.db"
    first = SqlBlobStore(db_path, namespace="first")
    second = SqlBlobStore(db_path, namespace="second")

    first.save(b"one")

    assert first.load() == b"one"
    assert second.load() is None
    first.dispose()
    second.dispose()


def test_sql_store_accepts_url_string(tmp_path):
    url = f"sqlite:///{tmp_path / 'by-url.db'}"
    store = SqlBlobStore(url)

    store.save(b"[]")

    assert SqlBlobStore(url).load() == b"[]"
    store.dispose()


def test_memory_store_can_refuse_writes():
    store = InMemoryBlobStore(b"old")
    store.fail_writes = True

    with pytest.raises(PersistenceError):
        store.save(b"new")
    assert store.load() == b"old"


def test_task_store_round_trip_through_sql(sql_store):
    tasks = TaskStore(sql_store)
    a = tasks.add("A")
    tasks.add("B")
    tasks.toggle_completion(a.task_id)

    reopened = TaskStore(sql_store)

    assert reopened.tasks == tasks.tasks


def test_task_store_round_trip_through_file(file_store: FileBlobStore):
    tasks = TaskStore(file_store)
    tasks.add("A")

    reopened = TaskStore(FileBlobStore(Path(file_store.path)))

    assert reopened.tasks == tasks.tasks


@pytest.mark.parametrize("url", ["garbage", "nosuchdialect://host/db"])
def test_sql_store_bad_url_raises_persistence_error(url):
    with pytest.raises(PersistenceError):
        SqlBlobStore(url)
