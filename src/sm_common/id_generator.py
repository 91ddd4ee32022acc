"""Monotonic per-kind id sequences for the in-memory store.

Ids start at 1 and are never handed out twice, even after the record they
named is deleted. PostgreSQL sequences play the same role for the SQL store.
"""


class SequenceIdGenerator:
    """Counter that only moves forward.

    `position` / `restore` exist so a unit of work can rewind ids that were
    allocated inside a rolled-back operation (those ids were never visible).
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError("sequence must start at 1 or above")
        self._next = start

    def next_id(self) -> int:
        value = self._next
        self._next += 1
        return value

    @property
    def position(self) -> int:
        return self._next

    def restore(self, position: int) -> None:
        self._next = position
