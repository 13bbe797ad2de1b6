"""Priority aging and rule-based deadlock prediction."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from bankersim.banker import Node

MAX_HISTORY = 100


def update_priorities(node: Node) -> None:
    """Age every unfinished process by raising its priority by one."""
    for process in node.processes:
        if not process.is_completed:
            process.priority += 1


def get_highest_priority_process(node: Node) -> int | None:
    """Return the index of the unfinished process with the highest priority.

    Only non-negative priorities are considered; ties go to the earliest
    process. Returns None when there is no candidate.
    """
    best: int | None = None
    best_priority = -1
    for index, process in enumerate(node.processes):
        if not process.is_completed and process.priority > best_priority:
            best_priority = process.priority
            best = index
    return best


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded outcome of a request."""

    process_id: int
    request: tuple[int, ...]
    was_safe: bool
    timestamp: int


@dataclass
class DeadlockPredictor:
    """Predicts deadlock from current demand and past unsafe requests."""

    max_history: int = MAX_HISTORY
    clock: Callable[[], float] = time.time
    history: deque[HistoryEntry] = field(init=False)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=self.max_history)

    def predict(self, node: Node, process_id: int, request: Sequence[int]) -> bool:
        """Return True if the request looks likely to lead to deadlock."""
        n = node.num_resources
        wanted = tuple(request[:n])
        total_needed = sum(
            sum(p.need[:n]) for p in node.processes if not p.is_completed
        )
        total_needed += sum(wanted)
        total_available = sum(node.available[:n])

        similar_unsafe = sum(
            1
            for entry in self.history
            if not entry.was_safe and entry.request[:n] == wanted
        )

        if total_needed > total_available * 2:
            return True
        return similar_unsafe > 3

    def record(self, node: Node, process_id: int, was_safe: bool) -> HistoryEntry:
        """Remember the process's current need and whether the state was safe."""
        process = node.processes[process_id]
        entry = HistoryEntry(
            process_id=process_id,
            request=tuple(process.need[: node.num_resources]),
            was_safe=was_safe,
            timestamp=int(self.clock()),
        )
        self.history.append(entry)
        return entry