from pathlib import Path
from typing import Optional
import logging
import os

from todos.domain.errors import PersistenceError
from todos.ports.blob_store import BlobStore, DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)


class FileBlobStore(BlobStore):
    """
        Blob w jednym pliku na dysku.

        Zapis jest atomowy: plik tymczasowy `*.swap` + fsync + `os.replace`,
        więc kolejny `load()` widzi albo stary, albo nowy blob w całości.

        :param path: Ścieżka do pliku bloba.
        :param namespace: Klucz logiczny (informacyjnie; plik jest jeden na namespace).
    """
    def __init__(self, path: Path | str, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.path = Path(path)
        self.namespace = namespace

    def load(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"{self.path}: {e}") from e

    def save(self, data: bytes) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".swap")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            try:
                if tmp.exists():
                    tmp.unlink()
            except OSError:
                logger.warning("Nie udało się usunąć pliku tymczasowego %s", tmp)
            raise PersistenceError(f"{self.path}: {e}") from e
        logger.debug("Zapisano %d B do %s", len(data), self.path)
