from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging

import sqlalchemy as db
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from todos.domain.errors import PersistenceError
from todos.ports.blob_store import BlobStore, DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)


def sqlite_url(path: Path | str) -> str:
    """Ścieżka do pliku -> URL SQLAlchemy (`sqlite:////abs/path.db`)."""
    return f"sqlite:///{Path(path).expanduser().resolve()}"


class SqlBlobStore(BlobStore):
    """
        Magazyn klucz-wartość w bazie SQL: jeden wiersz na `namespace`.

        url: np. 'sqlite:///data/todos.db' albo Path do pliku SQLite (zostanie zrobiony URL).
    """
    def __init__(self, url: str | Path, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.namespace = namespace
        self.meta = db.MetaData()

        self.blobs = db.Table(
            "blobs",
            self.meta,
            db.Column("namespace", db.String, primary_key=True),
            db.Column("payload", db.LargeBinary, nullable=False),
            db.Column("updated_at", db.String, nullable=False),  # ISO8601 '...Z'
        )

        # zły URL, brak sterownika, niedostępna baza -> PersistenceError
        try:
            db_url = self._prepare_url(url)
            self.engine = db.create_engine(db_url, future=True)
            self.meta.create_all(self.engine)
        except (SQLAlchemyError, OSError, ImportError) as e:
            raise PersistenceError(f"{url}: {e}") from e

    @staticmethod
    def _prepare_url(url: str | Path) -> str:
        """Path -> URL SQLite; dla plikowego SQLite tworzy katalog nadrzędny."""
        if isinstance(url, Path):
            url.parent.mkdir(parents=True, exist_ok=True)
            return sqlite_url(url)
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
            Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        return url

    def load(self) -> Optional[bytes]:
        stmt = db.select(self.blobs.c.payload).where(self.blobs.c.namespace == self.namespace)
        try:
            with self.engine.connect() as conn:
                payload = conn.execute(stmt).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(str(e)) from e
        return bytes(payload) if payload is not None else None

    def save(self, data: bytes) -> None:
        rec = {
            "payload": bytes(data),
            "updated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        update = (
            db.update(self.blobs)
            .where(self.blobs.c.namespace == self.namespace)
            .values(**rec)
        )
        try:
            # update + ewentualny insert w jednej transakcji
            with self.engine.begin() as conn:
                result = conn.execute(update)
                if result.rowcount == 0:
                    conn.execute(db.insert(self.blobs).values(namespace=self.namespace, **rec))
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(str(e)) from e
        logger.debug("Zapisano %d B w %s (namespace=%s)", len(data), self.engine.url, self.namespace)

    def dispose(self) -> None:
        self.engine.dispose()
