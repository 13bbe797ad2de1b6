"""Sample workloads, the per-node request simulator and the monitor command."""

from __future__ import annotations

import argparse
import random
import sys
import threading
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from bankersim.banker import Node
from bankersim.distributed import DEFAULT_BASE_PORT, DEFAULT_HOST, message_handler
from bankersim.scheduler import DeadlockPredictor, update_priorities

NUM_RESOURCES = 3
DEFAULT_AVAILABLE = (10, 5, 7)
_IDLE_WAIT = 0.01


@dataclass(frozen=True)
class ProcessData:
    """Initial claim, allocation and priority of one sample process."""

    max_claim: tuple[int, ...]
    allocation: tuple[int, ...]
    priority: int


USER1_PROCESSES = (
    ProcessData((7, 5, 3), (0, 1, 0), 1),
    ProcessData((3, 2, 2), (2, 0, 0), 2),
    ProcessData((9, 0, 2), (3, 0, 2), 3),
)

USER2_PROCESSES = (
    ProcessData((2, 2, 2), (2, 1, 1), 1),
    ProcessData((4, 3, 3), (0, 0, 2), 2),
    ProcessData((3, 3, 2), (1, 0, 0), 3),
)

USER3_PROCESSES = (
    ProcessData((4, 3, 3), (1, 1, 1), 1),
    ProcessData((6, 1, 1), (2, 1, 0), 2),
    ProcessData((3, 2, 2), (0, 0, 2), 3),
)

USER_DATASETS = (USER1_PROCESSES, USER2_PROCESSES, USER3_PROCESSES)


def init_node_with_data(node_id: int, processes: Iterable[ProcessData]) -> Node:
    """Build a node with the default free resources and the given processes."""
    node = Node(node_id, NUM_RESOURCES, available=DEFAULT_AVAILABLE)
    for data in processes:
        node.add_process(data.max_claim, data.allocation, data.priority)
    return node


class StepOutcome(Enum):
    SKIPPED = "skipped"
    DEADLOCK_PREDICTED = "deadlock predicted"
    GRANTED = "granted"
    COMPLETED = "completed"
    DENIED = "denied"


@dataclass(frozen=True)
class StepResult:
    """What one simulation step did."""

    node_id: int
    process_id: int
    outcome: StepOutcome
    request: tuple[int, ...] = field(default=())

    def lines(self) -> list[str]:
        """Status lines describing the step."""
        prefix = f"Node {self.node_id}"
        pid = self.process_id
        if self.outcome is StepOutcome.DEADLOCK_PREDICTED:
            return [f"{prefix}: Deadlock predicted for process {pid}"]
        if self.outcome is StepOutcome.GRANTED:
            return [f"{prefix}: Process {pid} request granted"]
        if self.outcome is StepOutcome.COMPLETED:
            return [
                f"{prefix}: Process {pid} request granted",
                f"{prefix}: Process {pid} completed",
            ]
        if self.outcome is StepOutcome.DENIED:
            return [f"{prefix}: Process {pid} request denied"]
        return []


def simulate_step(
    node: Node, predictor: DeadlockPredictor, rng: random.Random
) -> StepResult:
    """Make one random request on behalf of a random process."""
    process_id = rng.randrange(node.num_processes)
    process = node.processes[process_id]
    if process.is_completed:
        return StepResult(node.node_id, process_id, StepOutcome.SKIPPED)

    request = tuple(rng.randint(0, max(need, 0)) for need in process.need)

    if predictor.predict(node, process_id, request):
        return StepResult(
            node.node_id, process_id, StepOutcome.DEADLOCK_PREDICTED, request
        )

    if node.request_resources(process_id, request):
        outcome = StepOutcome.GRANTED
        if process.is_finished():
            process.is_completed = True
            outcome = StepOutcome.COMPLETED
    else:
        outcome = StepOutcome.DENIED

    update_priorities(node)
    return StepResult(node.node_id, process_id, outcome, request)


def process_simulator(
    node: Node,
    predictor: DeadlockPredictor,
    stop_event: threading.Event,
    rng: random.Random | None = None,
) -> None:
    """Run random requests against the node until stop_event is set."""
    rng = rng if rng is not None else random.Random()
    while not stop_event.is_set():
        result = simulate_step(node, predictor, rng)
        for line in result.lines():
            print(line, flush=True)
        if result.outcome in (StepOutcome.SKIPPED, StepOutcome.DEADLOCK_PREDICTED):
            stop_event.wait(_IDLE_WAIT)
        else:
            stop_event.wait(rng.randrange(1000) / 1000)


def _run_handler(
    node: Node, stop_event: threading.Event, host: str, base_port: int
) -> None:
    try:
        message_handler(node, stop_event, host, base_port)
    except OSError as exc:
        print(f"Node {node.node_id}: listener failed: {exc}", file=sys.stderr)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bankersim",
        description="Simulate Banker's algorithm resource allocation on several nodes.",
    )
    parser.add_argument("--interval", type=float, default=5.0,
                        help="seconds between state reports")
    parser.add_argument("--duration", type=float, default=None,
                        help="stop after this many seconds (default: run until interrupted)")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--base-port", type=int, default=DEFAULT_BASE_PORT)
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Start every node's simulator and listener and report their state."""
    args = _parse_args(argv)
    nodes = [init_node_with_data(i, data) for i, data in enumerate(USER_DATASETS)]
    predictor = DeadlockPredictor()
    stop = threading.Event()

    threads: list[threading.Thread] = []
    for node in nodes:
        seed = None if args.seed is None else args.seed + node.node_id
        threads.append(threading.Thread(
            target=process_simulator,
            args=(node, predictor, stop, random.Random(seed)),
            daemon=True,
        ))
        threads.append(threading.Thread(
            target=_run_handler,
            args=(node, stop, args.host, args.base_port),
            daemon=True,
        ))
    for thread in threads:
        thread.start()

    deadline = None if args.duration is None else time.monotonic() + args.duration
    try:
        while not stop.is_set():
            for node in nodes:
                print(node.format_state(), end="")
            print("\n---", flush=True)
            wait = args.interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                wait = min(wait, remaining)
            stop.wait(wait)
    except KeyboardInterrupt:
        pass
    finally:
        stop.set()
        for thread in threads:
            thread.join(2.0)
    return 0