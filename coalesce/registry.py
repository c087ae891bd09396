"""Defines the DeadlineRegistry class."""

import heapq
from typing import Callable, Dict, List, Optional, Tuple

Callback = Callable[[], None]


class DeadlineRegistry:
    """
    Pending callbacks grouped by the absolute time they become due.

    Each deadline maps to the list of callbacks due at that instant, in the
    order they were inserted. A deadline is present only while at least one
    callback is waiting on it; draining a deadline removes it entirely.
    """

    # Callback groups keyed by deadline
    _groups: Dict[float, List[Callback]]
    # Min-heap holding exactly the keys of _groups
    _deadlines: List[float]
    # Total number of callbacks across all groups
    _count: int

    def __init__(self) -> None:
        """Create an empty registry."""
        self._groups = {}
        self._deadlines = []
        self._count = 0

    def __len__(self) -> int:
        """Return the number of pending callbacks."""
        return self._count

    def __bool__(self) -> bool:
        """Return True if any callback is pending."""
        return bool(self._groups)

    def insert(self, deadline: float, callback: Callback) -> None:
        """
        Add a callback to the group due at deadline.

        Parameters:
            deadline: Absolute due time (milliseconds)
            callback: The function to call once the deadline is reached

        """
        group = self._groups.get(deadline)
        if group is None:
            group = self._groups[deadline] = []
            heapq.heappush(self._deadlines, deadline)
        group.append(callback)
        self._count += 1

    def earliest_deadline(self) -> Optional[float]:
        """Return the soonest pending deadline, or None if nothing is pending."""
        if not self._deadlines:
            return None
        return self._deadlines[0]

    def drain_due(self, now: float) -> List[Tuple[float, List[Callback]]]:
        """
        Remove and return every group whose deadline is at or before now.

        Parameters:
            now: The current time (milliseconds)

        Returns:
            (deadline, callbacks) pairs in increasing deadline order. Callbacks
            within a group are in insertion order.

        """
        due = []
        while self._deadlines and self._deadlines[0] <= now:
            deadline = heapq.heappop(self._deadlines)
            group = self._groups.pop(deadline)
            self._count -= len(group)
            due.append((deadline, group))
        return due

    def restore(self, groups: List[Tuple[float, List[Callback]]]) -> None:
        """
        Put drained callbacks back ahead of anything filed since.

        Parameters:
            groups: (deadline, callbacks) pairs, as returned by drain_due()

        """
        for deadline, callbacks in groups:
            if not callbacks:
                continue
            group = self._groups.get(deadline)
            if group is None:
                self._groups[deadline] = list(callbacks)
                heapq.heappush(self._deadlines, deadline)
            else:
                group[:0] = callbacks
            self._count += len(callbacks)

    def deadlines(self) -> List[float]:
        """Return the pending deadlines in increasing order."""
        return sorted(self._deadlines)
