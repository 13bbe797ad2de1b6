import pytest

from bankersim.banker import MAX_PROCESSES, Node, Process


def sample_node():
    node = Node(0, 3, available=[10, 5, 7])
    node.add_process([7, 5, 3], [0, 1, 0], 1)
    node.add_process([3, 2, 2], [2, 0, 0], 2)
    node.add_process([9, 0, 2], [3, 0, 2], 3)
    return node


def totals(node):
    return [
        node.available[i] + sum(p.allocation[i] for p in node.processes)
        for i in range(node.num_resources)
    ]


def test_add_process_sets_need_and_pid():
    node = sample_node()
    for index, p in enumerate(node.processes):
        assert p.pid == index
        assert [m - a for m, a in zip(p.max, p.allocation)] == p.need
    assert node.num_processes == 3


def test_add_process_limit():
    node = Node(1, 1, available=[1])
    for _ in range(MAX_PROCESSES):
        node.add_process([1], [0])
    with pytest.raises(ValueError):
        node.add_process([1], [0])


def test_wrong_vector_length_rejected():
    node = Node(0, 3)
    with pytest.raises(ValueError):
        node.add_process([1, 2], [0, 0, 0])


def test_bad_resource_count():
    with pytest.raises(ValueError):
        Node(0, 11)


def test_process_is_finished():
    assert Process(pid=0, need=[0, 0]).is_finished() is True
    assert Process(pid=0, need=[0, 1]).is_finished() is False


def test_sample_state_is_safe():
    assert sample_node().is_safe_state() is True


def test_unsafe_state_detected():
    node = Node(0, 1, available=[0])
    node.add_process([2], [1])
    node.add_process([2], [1])
    assert node.is_safe_state() is False


def test_completed_processes_ignored_by_safety_check():
    node = Node(0, 1, available=[0])
    p = node.add_process([2], [1])
    p.is_completed = True
    assert node.is_safe_state() is True


def test_request_granted_preserves_totals():
    node = sample_node()
    before = totals(node)
    assert node.request_resources(1, [1, 0, 2]) is True
    assert totals(node) == before
    p = node.processes[1]
    assert [m - a for m, a in zip(p.max, p.allocation)] == p.need


def test_request_exceeding_need_raises():
    node = sample_node()
    with pytest.raises(ValueError):
        node.request_resources(2, [0, 1, 0])


def test_request_exceeding_available_denied():
    node = Node(0, 1, available=[1])
    node.add_process([5], [0])
    assert node.request_resources(0, [3]) is False
    assert node.available == [1]


def test_unsafe_request_rolled_back():
    node = Node(0, 1, available=[1])
    node.add_process([2], [0])
    node.add_process([1], [0])
    assert node.request_resources(0, [1]) is False
    assert node.available == [1]
    assert node.processes[0].allocation == [0]
    assert node.processes[0].need == [2]


def test_invalid_process_id():
    node = sample_node()
    with pytest.raises(IndexError):
        node.request_resources(5, [0, 0, 0])
    with pytest.raises(IndexError):
        node.release_resources(-1, [0, 0, 0])


def test_release_round_trip():
    node = sample_node()
    snapshot = (list(node.available), [list(p.need) for p in node.processes])
    assert node.request_resources(0, [1, 1, 1]) is True
    node.release_resources(0, [1, 1, 1])
    assert (list(node.available), [list(p.need) for p in node.processes]) == snapshot


def test_release_too_much_raises():
    node = sample_node()
    with pytest.raises(ValueError):
        node.release_resources(0, [1, 0, 0])


def test_can_grant_request_does_not_mutate():
    node = sample_node()
    before = (list(node.available), [list(p.allocation) for p in node.processes])
    assert node.can_grant_request(1, [1, 0, 2]) is True
    assert (list(node.available), [list(p.allocation) for p in node.processes]) == before


def test_can_grant_request_unsafe():
    node = Node(0, 1, available=[1])
    node.add_process([2], [0])
    node.add_process([1], [0])
    assert node.can_grant_request(0, [1]) is False


def test_format_state():
    node = Node(4, 2, available=[3, 1])
    node.add_process([2, 2], [0, 0])
    text = node.format_state()
    lines = text.split("\n")
    assert lines[1] == "Node 4 State:"
    assert lines[2] == "Available Resources: 3 1 "
    assert lines[4] == "Process\tAllocation\tMax\t\tNeed"
    assert lines[5] == "P0\t0 0 \t2 2 \t2 2 "