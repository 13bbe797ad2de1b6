# bankersim

This package simulates the Banker's algorithm on several nodes at once. Each
node holds a pool of resources and a set of processes. The processes make
random resource requests. A request is granted only when resources are free
and the state that results is still safe. Waiting processes gain priority as
they age. A simple rule-based predictor turns away requests that look likely
to lead to deadlock. Nodes can also exchange fixed-size messages over TCP
sockets to request, release or borrow resources.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running the simulation

```
bankersim
```

The command starts three nodes. Each node is loaded with its own sample set of
three processes and begins with `10 5 7` free resources. Each node gets two
threads. One runs the process simulator. The other runs a message listener on
`base-port + node id`. The state of every node is printed at a fixed interval,
and every simulator step prints a status line. Press Ctrl+C to stop.

Options:

- `--interval SECONDS`: time between state reports (default 5).
- `--duration SECONDS`: stop after this long. By default the command runs until it is interrupted.
- `--host HOST`: the address the listeners bind to and that messages are sent to (default `127.0.0.1`).
- `--base-port PORT`: node *n* listens on `PORT + n` (default 8080).
- `--seed N`: seed for the random requests. Node *n* uses `N + n`.

If a listener cannot bind its port, the command reports this on stderr and the
simulation runs on without that listener.

## Using the library

```python
from bankersim.banker import Node
from bankersim.scheduler import (
    DeadlockPredictor,
    get_highest_priority_process,
    update_priorities,
)

node = Node(node_id=0, num_resources=3, available=[10, 5, 7])
node.add_process(max_claim=[7, 5, 3], allocation=[0, 1, 0], priority=1)
node.add_process(max_claim=[3, 2, 2], allocation=[2, 0, 0], priority=2)

print(node.is_safe_state())
granted = node.request_resources(0, [1, 0, 0])  # False if it must wait
node.release_resources(0, [1, 0, 0])
print(node.format_state())

predictor = DeadlockPredictor()
risky = predictor.predict(node, 0, [1, 1, 1])
predictor.record(node, 0, was_safe=True)

update_priorities(node)
print(get_highest_priority_process(node))  # index, or None
```

### `bankersim.banker`

A `Node` holds at most 10 processes and between 1 and 10 resource types. Each
`Process` carries its `allocation`, its `max` claim and its remaining `need`.

- `Node.request_resources` returns `False` when the resources are not free or
  when granting them would leave an unsafe state. In the unsafe case the
  allocation is rolled back. It raises `ValueError` when the request exceeds
  the process's remaining need.
- `Node.release_resources` raises `ValueError` when the release exceeds the
  process's allocation.
- Both methods raise `IndexError` for an unknown process id.
- `Node.can_grant_request` runs the safety check on a copy of the node and
  leaves the node itself unchanged.

### `bankersim.scheduler`

- `update_priorities` raises the priority of every unfinished process by one.
- `DeadlockPredictor.predict` flags a request in two cases. The first is when
  the total need of all unfinished processes, plus the request, is more than
  twice the total of free resources. The second is when more than three
  recorded unsafe entries match the request.
- `DeadlockPredictor.record` stores the process's current need as a
  `HistoryEntry`. At most `max_history` entries are kept (default 100). Older
  entries are dropped first.

### `bankersim.distributed`

- A `Message` has a source node, a destination node, a `RequestType` and up to
  10 resource counts.
- `Message.to_bytes` encodes a message and `Message.from_bytes` decodes it.
- `send_message` delivers a message to the node listening on
  `base_port + dest_node_id`.
- `message_handler` accepts messages for a node until its stop event is set,
  and applies each one with `process_message`.
- `request_borrow` asks another node for resources. `process_borrow_request`
  lends them if they are free and sends a `BORROW_GRANT` message back.

### `bankersim.simulation`

- `init_node_with_data` builds a node from a list of `ProcessData`.
- `simulate_step` performs one random request and returns a `StepResult`.
- `process_simulator` repeats `simulate_step` until its stop event is set.
- `main` is the `bankersim` command.

## What it does not do

- When a node receives a `BORROW_GRANT` message, it ignores it. A lending node
  removes the lent resources from its own pool, but the borrowing node never
  adds them to its pool.
- The `bankersim` command never sends messages between its nodes. The
  listeners only serve messages sent to them from outside the command.
- The command never calls `DeadlockPredictor.record`, so only the demand rule
  of the predictor takes effect there.
- Resources held by completed processes are not returned to the pool.
- The simulation state lives only in memory and is not saved.