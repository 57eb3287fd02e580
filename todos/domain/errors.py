

### COMMENTS
# ============================================
# Konwencja użycia błędów domenowych w projekcie
# ============================================
# - Adaptery trwałości (blob store):
#     * mapują błędy techniczne (OSError, SQLAlchemyError) na PersistenceError
#     * brak zapisanych danych to NIE jest błąd: load() zwraca None
#
# - TaskStore:
#     * nieznane ID w toggle/update/delete to no-op, bez wyjątku
#     * PersistenceError przy odczycie: log + start z pustą listą
#     * PersistenceError przy zapisie: log + last_save_error, zmiana w pamięci zostaje
#
# - UI (CLI):
#     * waliduje tytuł przed add/update i rzuca TaskValidationError
#     * nie znaleziono ID podanego przez użytkownika: TaskNotFoundError
#     * łapie DomainError i wyświetla przyjazny komunikat


class DomainError(Exception):
    """Bazowa klasa dla błędów domenowych.
    Umożliwia odróżnienie błędów domeny od błędów technicznych.
    Nie powinna być rzucana bezpośrednio, używaj klas pochodnych.
    """


class TaskValidationError(DomainError):
    """Rzucany, gdy dane wejściowe nie spełniają reguł dla zadania.
    Przykłady:
    - tytuł jest pusty albo składa się z samych białych znaków,
    - priorytet ma niepoprawną wartość,
    - numer wiersza widoku jest spoza zakresu.
    Zgłaszany po stronie wywołującego (CLI), zanim dane trafią do TaskStore.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Błąd walidacji pola '{self.field}': {self.message}"


class TaskNotFoundError(DomainError):
    """Rzucany przez CLI, gdy podane ID (lub jego prefiks) nie pasuje do żadnego zadania."""
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Zadanie o ID {self.task_id} nie istnieje."


class PersistenceError(DomainError):
    """Odczyt lub zapis bloba nie powiódł się (I/O, brak uprawnień, uszkodzone dane)."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
