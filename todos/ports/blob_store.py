from typing import Protocol, Optional


### COMMENTS
# ==========================================================
# Kontrakt magazynu bloba (ports/blob_store.py).
# ==========================================================
# TaskStore nie zna formatu przechowywania. Widzi tylko jeden nieprzezroczysty
# ciąg bajtów pod stałym kluczem (namespace), bez wersji schematu.
# - Adapter odpowiada za atomowość zapisu (brak częściowego stanu przy następnym load).
# - Błędy techniczne są mapowane na `PersistenceError`.
# - Brak danych (pierwsze uruchomienie) to stan poprawny: load() zwraca None.

DEFAULT_NAMESPACE = "com.todoapp.todos"


class BlobStore(Protocol):
    """Interfejs magazynu jednego bloba bajtów.

    Adaptery (implementacje) muszą:
    - zapisywać atomowo (cały blob albo nic),
    - mapować błędy technologiczne na `PersistenceError`,
    - nie interpretować zawartości bloba.
    """

    namespace: str

    def load(self) -> Optional[bytes]:
        """Zwraca ostatnio zapisane bajty dla `namespace`.

        Zwraca:
            Optional[bytes]: Zapisane bajty albo `None`, gdy nic jeszcze nie zapisano.

        Wyjątki domenowe:
            PersistenceError: Tylko przy rzeczywistym błędzie odczytu.
        """

    def save(self, data: bytes) -> None:
        """Nadpisuje blob dla `namespace`.

        Wyjątki domenowe:
            PersistenceError: Gdy zapis się nie powiódł (poprzednia zawartość zostaje).
        """
