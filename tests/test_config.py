import logging
from pathlib import Path

import pytest

from todos.config import Settings
from todos import logging_setup
from todos.logging_setup import setup_logging
from todos.ports.blob_store import DEFAULT_NAMESPACE


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # brak .env w katalogu roboczym i brak zmiennych z zewnątrz
    monkeypatch.chdir(tmp_path)
    for name in ("BACKEND", "DATA_DIR", "NAMESPACE", "DB_URL", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"TODOS_{name}", raising=False)
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h, logging_setup._OwnHandlerMixin):
            root.removeHandler(h)
            h.close()


def test_defaults():
    s = Settings.from_env()

    assert s.backend == "file"
    assert s.data_dir == Path(".local/todos")
    assert s.namespace == DEFAULT_NAMESPACE
    assert s.blob_path == Path(".local/todos") / f"{DEFAULT_NAMESPACE}.json"
    assert s.db_url == f"sqlite:///{Path('.local/todos') / 'todos.sqlite3'}"
    assert s.log_level == "WARNING"
    assert s.log_file is None


def test_values_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("TODOS_BACKEND", "SQL")
    monkeypatch.setenv("TODOS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("TODOS_NAMESPACE", "work")
    monkeypatch.setenv("TODOS_LOG_LEVEL", "debug")
    monkeypatch.setenv("TODOS_LOG_FILE", str(tmp_path / "todos.log"))

    s = Settings.from_env()

    assert s.backend == "sql"
    assert s.blob_path == tmp_path / "data" / "work.json"
    assert s.log_level == "DEBUG"
    assert s.log_file == tmp_path / "todos.log"


def test_invalid_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TODOS_BACKEND", "redis")
    monkeypatch.setenv("TODOS_LOG_LEVEL", "LOUD")
    monkeypatch.setenv("TODOS_NAMESPACE", "   ")

    s = Settings.from_env()

    assert s.backend == "file"
    assert s.log_level == "WARNING"
    assert s.namespace == DEFAULT_NAMESPACE


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("TODOS_BACKEND=memory\n", encoding="utf-8")

    assert Settings.from_env().backend == "memory"


def test_setup_logging_writes_file_and_replaces_own_handlers(tmp_path):
    log_file = tmp_path / "logs" / "todos.log"
    root = logging.getLogger()

    def own_handlers():
        return [h for h in root.handlers if isinstance(h, logging_setup._OwnHandlerMixin)]

    setup_logging("INFO", log_file)
    setup_logging("INFO", log_file)
    logging.getLogger("todos.test").debug("hello %s", "file")

    assert len(own_handlers()) == 2
    for h in root.handlers:
        h.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")

    setup_logging("WARNING")
    assert len(own_handlers()) == 1


def test_explicit_mapping_skips_process_environment(monkeypatch):
    monkeypatch.setenv("TODOS_BACKEND", "sql")

    s = Settings.from_env({"TODOS_BACKEND": "memory", "TODOS_DB_URL": "sqlite:///x.db"})

    assert s.backend == "memory"
    assert s.db_url == "sqlite:///x.db"


def test_setup_logging_console_goes_to_stderr(capsys):
    setup_logging("WARNING")
    log = logging.getLogger("todos.test")

    log.warning("visible %d", 1)
    log.info("hidden")

    err = capsys.readouterr().err
    assert "WARNING todos.test: visible 1" in err
    assert "hidden" not in err
