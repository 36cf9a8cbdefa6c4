"""Functional tests for the reactive cell primitives.

Covers change suppression on writes, lazy memoized recomputation, dynamic
dependency sets, cyclic read detection and error propagation.
"""

from __future__ import annotations

import threading

import pytest

from reactive_questionnaire.logic.cells import Cell, Computed, CyclicDependencyError, constant


def test_cell_set_suppresses_equal_writes() -> None:
    source = Cell(1)
    calls = []
    derived = Computed(lambda: calls.append(1) or source.get() * 2)

    assert derived.get() == 2
    source.set(1)
    assert derived.stale is False
    assert derived.get() == 2
    assert len(calls) == 1


def test_cell_uses_custom_equality() -> None:
    source = Cell("a", equals=lambda x, y: x.lower() == y.lower())
    derived = Computed(lambda: source.get())
    derived.get()

    source.set("A")
    assert derived.stale is False
    assert source.get() == "a"

    source.set("b")
    assert derived.stale is True
    assert derived.get() == "b"


def test_computed_is_lazy_and_memoized() -> None:
    source = Cell(3)
    calls = []

    def square() -> int:
        calls.append(1)
        return source.get() ** 2

    derived = Computed(square)
    assert calls == []
    assert derived.get() == 9
    assert derived.get() == 9
    assert len(calls) == 1

    source.set(4)
    # Writes only mark stale; nothing runs until the next read.
    assert len(calls) == 1
    assert derived.get() == 16
    assert len(calls) == 2


def test_staleness_propagates_through_chains() -> None:
    a = Cell(1)
    b = Computed(lambda: a.get() + 1)
    c = Computed(lambda: b.get() * 10)
    assert c.get() == 20

    a.set(5)
    assert b.stale and c.stale
    assert c.get() == 60


def test_dependencies_are_recorded_per_recomputation() -> None:
    switch = Cell(True)
    left = Cell("L")
    right = Cell("R")
    chosen = Computed(lambda: left.get() if switch.get() else right.get())

    assert chosen.get() == "L"
    assert chosen.sources == {switch, left}

    switch.set(False)
    assert chosen.get() == "R"
    assert chosen.sources == {switch, right}
    assert chosen not in left.dependents

    left.set("changed")
    assert chosen.stale is False


def test_cyclic_read_raises() -> None:
    cells = {}
    cells["a"] = Computed(lambda: cells["b"].get())
    cells["b"] = Computed(lambda: cells["a"].get())

    with pytest.raises(CyclicDependencyError):
        cells["a"].get()


def test_function_error_reaches_reader_and_cell_stays_stale() -> None:
    divisor = Cell(0)
    ratio = Computed(lambda: 10 / divisor.get())

    with pytest.raises(ZeroDivisionError):
        ratio.get()
    assert ratio.stale is True

    divisor.set(5)
    assert ratio.get() == 2


def test_constant_never_changes() -> None:
    always = constant(True)
    assert always.get() is True
    assert always.sources == set()


def test_reads_on_another_thread_are_not_recorded() -> None:
    mine = Cell(1)
    other = Cell(10)
    entered = threading.Event()
    release = threading.Event()

    def slow() -> int:
        value = mine.get()
        entered.set()
        release.wait(5)
        return value

    derived = Computed(slow)
    worker = threading.Thread(target=derived.get)
    worker.start()
    assert entered.wait(5)

    # The worker is mid-recompute; this thread's read must not land on it.
    assert other.get() == 10
    release.set()
    worker.join(5)

    assert derived.sources == {mine}
    other.set(11)
    assert derived.stale is False
    mine.set(2)
    assert derived.stale is True
