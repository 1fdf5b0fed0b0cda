"""
Tests for the binary-heap PriorityQueue.
"""

import random

from pulsebus.priority_queue import PriorityQueue


def _drain(pq):
    out = []
    while not pq.empty():
        out.append(pq.pop())
    return out


# ── Ordering ─────────────────────────────────────────────────────────────────


class TestOrdering:
    def test_default_greater_wins(self):
        pq = PriorityQueue()
        for value in (22, 33, 11):
            pq.push(value)
        assert pq.pop() == 33
        assert pq.pop() == 22
        assert pq.pop() == 11

    def test_custom_comparator_smaller_wins(self):
        pq = PriorityQueue(lambda a, b: a < b)
        for value in (22, 33, 11):
            pq.push(value)
        assert _drain(pq) == [11, 22, 33]

    def test_pop_is_non_increasing_for_random_input(self):
        rng = random.Random(7)
        values = [rng.randint(-50, 50) for _ in range(200)]
        pq = PriorityQueue()
        for value in values:
            pq.push(value)
        assert _drain(pq) == sorted(values, reverse=True)

    def test_comparator_on_records(self):
        pq = PriorityQueue(lambda a, b: a["val"] > b["val"])
        for val in (5, 1, 9, 3):
            pq.push({"val": val})
        assert [item["val"] for item in _drain(pq)] == [9, 5, 3, 1]

    def test_interleaved_push_pop(self):
        pq = PriorityQueue()
        pq.push(4)
        pq.push(8)
        assert pq.pop() == 8
        pq.push(6)
        pq.push(1)
        assert pq.pop() == 6
        assert pq.pop() == 4
        assert pq.pop() == 1


# ── top / pop on empty ───────────────────────────────────────────────────────


class TestTopAndEmpty:
    def test_top_does_not_remove(self):
        pq = PriorityQueue()
        for value in (22, 33, 11):
            pq.push(value)
        assert pq.top() == 33
        assert pq.top() == 33
        assert pq.size() == 3
        pq.pop()
        assert pq.top() == 22

    def test_empty_queue_returns_none(self):
        pq = PriorityQueue()
        assert pq.top() is None
        assert pq.pop() is None
        assert pq.empty()
        assert len(pq) == 0

    def test_clear(self):
        pq = PriorityQueue()
        for value in (22, 33, 11):
            pq.push(value)
        assert not pq.empty()
        assert pq.size() == 3
        pq.clear()
        assert pq.empty()
        assert pq.top() is None


# ── contains / to_list ───────────────────────────────────────────────────────


class TestContains:
    def test_contains_every_pushed_value(self):
        pq = PriorityQueue()
        values = [22, 33, 11, 7, 40, 18, 2]
        for value in values:
            pq.push(value)
        for value in values:
            assert pq.contains(value)
        assert not pq.contains(99)

    def test_contains_single_element(self):
        pq = PriorityQueue()
        pq.push(5)
        assert pq.contains(5)

    def test_contains_with_predicate(self):
        pq = PriorityQueue(lambda a, b: a["val"] > b["val"])
        for val in (22, 33, 11):
            pq.push({"val": val})
        assert pq.contains({"val": 11}, lambda item: item["val"] == 11)
        assert not pq.contains(None, lambda item: item["val"] == 12)

    def test_contains_on_empty(self):
        assert not PriorityQueue().contains(1)


class TestToList:
    def test_snapshot_is_heap_order(self):
        pq = PriorityQueue()
        for value in (1, 2, 3):
            pq.push(value)
        # 3 sifts up past 2; the array is heap-shaped, not sorted
        assert pq.to_list() == [3, 1, 2]

    def test_snapshot_is_a_copy(self):
        pq = PriorityQueue()
        pq.push(1)
        snapshot = pq.to_list()
        snapshot.append(2)
        assert pq.size() == 1
        assert list(pq) == [1]
