# tests/unit/services/test_deadline.py
from __future__ import annotations

import pytest
from credo.services._shared.deadline import Deadline, check_deadline
from credo.services._shared.errors import DeadlineExceededError


class Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_remaining_counts_down_and_floors_at_zero():
    clock = Clock()
    deadline = Deadline.after(5, clock=clock)

    assert deadline.remaining() == 5
    clock.now += 7
    assert deadline.remaining() == 0
    assert deadline.expired


def test_check_names_the_operation():
    clock = Clock()
    deadline = Deadline.after(0, clock=clock)

    with pytest.raises(DeadlineExceededError) as excinfo:
        deadline.check("refresh.revoke")
    assert excinfo.value.operation == "refresh.revoke"


def test_check_deadline_accepts_none():
    check_deadline(None, "anything")
