from typing import Optional

from todos.domain.errors import PersistenceError
from todos.ports.blob_store import BlobStore, DEFAULT_NAMESPACE

### COMMENTS
# ==========================================================
# Adapter pamięciowy magazynu bloba (adapters/memory/blob_store.py).
# ==========================================================
# - Służy do testów, trybu `--memory` w CLI oraz komendy `demo`.
# - Dane żyją tak długo jak obiekt (brak trwałości między uruchomieniami).
# - `fail_writes=True` symuluje odmowę zapisu (ścieżka "soft failure" w TaskStore).


class InMemoryBlobStore(BlobStore):
    """
        Magazyn bloba w słowniku `namespace -> bytes`.

        :param initial: Opcjonalne bajty startowe dla `namespace` (seed, nie API).
        :param namespace: Klucz, pod którym trzymany jest blob.
    """
    def __init__(self, initial: bytes | None = None, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.namespace = namespace
        self._data: dict[str, bytes] = {}
        if initial is not None:
            self._data[namespace] = bytes(initial)
        self.fail_writes = False
        self.save_count = 0

    def load(self) -> Optional[bytes]:
        return self._data.get(self.namespace)

    def save(self, data: bytes) -> None:
        """
            Nadpisuje blob dla `namespace`.

            :raises PersistenceError: Gdy ustawiono `fail_writes` (stara zawartość zostaje).
        """
        if self.fail_writes:
            raise PersistenceError(f"zapis do '{self.namespace}' odrzucony")
        self._data[self.namespace] = bytes(data)
        self.save_count += 1
