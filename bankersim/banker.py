"""Per-node resource bookkeeping and the Banker's safety algorithm."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

MAX_PROCESSES = 10
MAX_RESOURCES = 10
MAX_NODES = 3


def _vector(values: Iterable[int], size: int, what: str) -> list[int]:
    vector = [int(v) for v in values]
    if len(vector) != size:
        raise ValueError(f"{what} must have {size} entries, got {len(vector)}")
    return vector


@dataclass
class Process:
    """A process with its resource claim, allocation and remaining need."""

    pid: int
    priority: int = 0
    allocation: list[int] = field(default_factory=list)
    max: list[int] = field(default_factory=list)
    need: list[int] = field(default_factory=list)
    is_completed: bool = False

    def is_finished(self) -> bool:
        """Return True when the process needs no further resources."""
        return all(n <= 0 for n in self.need)


class Node:
    """One node of the system: its free resources and its processes."""

    def __init__(
        self,
        node_id: int,
        num_resources: int,
        available: Iterable[int] | None = None,
    ) -> None:
        if not 0 < num_resources <= MAX_RESOURCES:
            raise ValueError(
                f"num_resources must be between 1 and {MAX_RESOURCES}"
            )
        self.node_id = node_id
        self.num_resources = num_resources
        self.available = (
            [0] * num_resources
            if available is None
            else _vector(available, num_resources, "available")
        )
        self.processes: list[Process] = []

    def __repr__(self) -> str:
        return (
            f"Node(node_id={self.node_id}, available={self.available}, "
            f"processes={len(self.processes)})"
        )

    @property
    def num_processes(self) -> int:
        return len(self.processes)

    def add_process(
        self,
        max_claim: Sequence[int],
        allocation: Sequence[int],
        priority: int = 0,
    ) -> Process:
        """Add a process with its maximum claim and current allocation."""
        if len(self.processes) >= MAX_PROCESSES:
            raise ValueError(f"a node holds at most {MAX_PROCESSES} processes")
        max_vec = _vector(max_claim, self.num_resources, "max_claim")
        alloc_vec = _vector(allocation, self.num_resources, "allocation")
        process = Process(
            pid=len(self.processes),
            priority=priority,
            allocation=alloc_vec,
            max=max_vec,
            need=[m - a for m, a in zip(max_vec, alloc_vec)],
        )
        self.processes.append(process)
        return process

    def _process(self, process_id: int) -> Process:
        if not 0 <= process_id < len(self.processes):
            raise IndexError(f"no process with id {process_id}")
        return self.processes[process_id]

    def is_safe_state(self) -> bool:
        """Return True if every unfinished process can run to completion."""
        work = list(self.available)
        finish = [p.is_completed for p in self.processes]
        found = True
        while found:
            found = False
            for index, process in enumerate(self.processes):
                if finish[index]:
                    continue
                if all(n <= w for n, w in zip(process.need, work)):
                    work = [w + a for w, a in zip(work, process.allocation)]
                    finish[index] = True
                    found = True
        return all(finish)

    def _apply(self, process: Process, delta: Sequence[int]) -> None:
        for i, amount in enumerate(delta):
            self.available[i] -= amount
            process.allocation[i] += amount
            process.need[i] -= amount

    def request_resources(self, process_id: int, request: Iterable[int]) -> bool:
        """Grant the request if resources are free and the result is safe.

        Returns False when the request must wait; raises when it exceeds
        the process's declared need.
        """
        process = self._process(process_id)
        req = _vector(request, self.num_resources, "request")
        if any(r > n for r, n in zip(req, process.need)):
            raise ValueError("request exceeds the process's remaining need")
        if any(r > a for r, a in zip(req, self.available)):
            return False
        self._apply(process, req)
        if self.is_safe_state():
            return True
        self._apply(process, [-r for r in req])
        return False

    def release_resources(self, process_id: int, release: Iterable[int]) -> None:
        """Return resources held by a process to the node."""
        process = self._process(process_id)
        rel = _vector(release, self.num_resources, "release")
        if any(r > a for r, a in zip(rel, process.allocation)):
            raise ValueError("release exceeds the process's allocation")
        self._apply(process, [-r for r in rel])

    def can_grant_request(self, process_id: int, request: Iterable[int]) -> bool:
        """Tell whether granting the request would leave a safe state."""
        self._process(process_id)
        req = _vector(request, self.num_resources, "request")
        trial = copy.deepcopy(self)
        trial._apply(trial.processes[process_id], req)
        return trial.is_safe_state()

    def format_state(self) -> str:
        """Render the node's state as a text table."""

        def row(values: Iterable[int]) -> str:
            return "".join(f"{v} " for v in values)

        lines = [
            "",
            f"Node {self.node_id} State:",
            f"Available Resources: {row(self.available)}",
            "",
            "Process\tAllocation\tMax\t\tNeed",
        ]
        for index, p in enumerate(self.processes):
            lines.append(
                f"P{index}\t{row(p.allocation)}\t{row(p.max)}\t{row(p.need)}"
            )
        return "\n".join(lines) + "\n"