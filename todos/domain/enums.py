from enum import Enum

from todos.domain.errors import TaskValidationError


class Priority(int, Enum):
    """Priorytet zadania; porządek po randze (LOW < MEDIUM < HIGH)."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, raw: "str | int | Priority") -> "Priority":
        """
            Zamienia tekst z CLI/pliku na `Priority`.

            Akceptuje nazwę (bez względu na wielkość liter) albo rangę 0/1/2.

            :raises TaskValidationError: Gdy wartość nie pasuje do żadnego priorytetu.
        """
        if isinstance(raw, Priority):
            return raw
        text = str(raw).strip()
        if text.isdigit():
            try:
                return cls(int(text))
            except ValueError:
                pass
        else:
            try:
                return cls[text.upper()]
            except KeyError:
                pass
        raise TaskValidationError("priority", f"Nieznany priorytet: {raw!r} (low/medium/high)")

    def __str__(self):
        return self.label
