from enum import Enum

from todos.domain.enums import Priority


class TaskColor(Enum):
    RED = "[red]"
    YELLOW = "[yellow]"
    BLUE = "[blue]"
    GREEN = "[green]"
    DIM = "[dim]"
    RESET = "[/]"

    def __str__(self):
        return self.value


PRIORITY_COLORS = {
    Priority.HIGH: TaskColor.RED,
    Priority.MEDIUM: TaskColor.YELLOW,
    Priority.LOW: TaskColor.BLUE,
}


def color_priority(priority: Priority) -> str:
    """Priorytet w Rich-markup z kolorem."""
    return f"{PRIORITY_COLORS[priority]}{priority.label}{TaskColor.RESET}"
