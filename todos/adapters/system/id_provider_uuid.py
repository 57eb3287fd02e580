import uuid

from todos.domain.task import TaskId
from todos.ports.system import IdProvider


class UuidIdProvider(IdProvider):
    """ID w postaci tekstowego UUID v4."""

    def new_id(self) -> TaskId:
        return TaskId(str(uuid.uuid4()))
