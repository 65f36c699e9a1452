"""Debugger test harness -- stepping, breakpoints, conditions, state diff.

Run: python test_debugger.py    (or: pytest)
"""

from __future__ import annotations

import sys
import os
import traceback

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np

from quantum_debugger.engine.circuit import (
    CircuitValidationError, GateInstance, QuantumCircuit,
)
from quantum_debugger.engine.debugger import (
    BreakCondition, BreakConditionKind, Comparison, DebugRequestError, DebugSession,
)
from quantum_debugger.engine.simulator import execute_circuit
from quantum_debugger.engine.state_vector import zero_state


TOLERANCE = 1e-9


def _check(name: str, passed: bool, details: str = ""):
    status = "PASS" if passed else "FAIL"
    print(f"  [{status}] {name}")
    if not passed:
        if details:
            print(f"         {details}")
        raise AssertionError(f"{name}: {details}")


def _ghz_circuit() -> QuantumCircuit:
    qc = QuantumCircuit(num_qubits=3)
    qc.add("H", 0, position=0, gate_id="h0")
    qc.add("CNOT", 1, position=1, control=0, gate_id="cx01")
    qc.add("CNOT", 2, position=2, control=1, gate_id="cx12")
    qc.add("RZ", 2, position=3, parameter=0.7, gate_id="rz2")
    qc.add("X", 0, position=4, gate_id="x0")
    return qc


# =========================================================================
# Test 1: Forward then backward returns to |0...0>
# =========================================================================

def test_round_trip():
    print("\nTest 1: Debug Round-Trip")
    print("-" * 40)

    qc = _ghz_circuit()
    session = DebugSession.from_circuit(qc)
    _check("starts at step 0", session.current_step == 0)
    _check("initial entropy 0", session.current_snapshot.entropy == 0.0)

    for k in range(qc.gate_count()):
        snap = session.step_forward()
        _check(f"forward to step {k + 1}",
               snap is not None and snap.step_index == k + 1 == session.current_step)
    _check("finished", session.is_finished and session.next_gate is None)
    _check("final state matches execute_circuit",
           np.allclose(session.current_snapshot.state, execute_circuit(qc, 3)))
    _check("history holds step + 1 snapshots", len(session.history) == 6)

    _check("step_forward at end is a no-op", session.step_forward() is None
           and session.current_step == 5)

    for _ in range(qc.gate_count()):
        session.step_backward()
    _check("back at step 0", session.current_step == 0)
    _check("state is |000>", np.array_equal(session.current_snapshot.state, zero_state(3)))
    _check("step_backward at 0 is a no-op", session.step_backward() is None
           and session.current_step == 0)


# =========================================================================
# Test 2: Snapshots are immutable
# =========================================================================

def test_snapshot_immutability():
    print("\nTest 2: Snapshot Immutability")
    print("-" * 40)

    session = DebugSession.from_circuit(_ghz_circuit())
    snap = session.step_forward()
    kept = snap.state.copy()
    try:
        snap.state[0] = 0
        writable = True
    except ValueError:
        writable = False
    _check("state array is read-only", not writable)

    session.step_forward()
    session.step_backward()
    session.step_backward()
    session.step_forward()
    _check("replayed snapshot equals the first run",
           np.array_equal(session.current_snapshot.state, kept))
    _check("old snapshot untouched", np.array_equal(snap.state, kept))


# =========================================================================
# Test 3: Breakpoint halts before its gate, ahead of conditions
# =========================================================================

def test_breakpoint_precedence():
    print("\nTest 3: Breakpoint Precedence")
    print("-" * 40)

    qc = QuantumCircuit(num_qubits=2)
    qc.add("X", 0, position=0, gate_id="x0")
    qc.add("H", 1, position=1, gate_id="h1")
    session = DebugSession.from_circuit(qc)

    # Only true once h1 has executed
    session.add_break_condition(BreakCondition(
        BreakConditionKind.PROBABILITY, 0.4, Comparison.ABOVE, qubit=1))
    _check("toggle sets", session.toggle_breakpoint("h1") is True)

    snap = session.run_until_break()
    _check("halted before h1", snap.step_index == 1, f"step {snap.step_index}")
    _check("hit_breakpoint = h1", session.hit_breakpoint == "h1")
    _check("no condition hit", session.hit_condition is None)
    _check("not running after return", not session.is_running)

    session.step_forward()
    _check("step clears halt reason", session.hit_breakpoint is None)
    _check("P(q1 = 1) = 0.5", abs(session.qubit_probability(1)[1] - 0.5) < TOLERANCE)

    _check("toggle clears", session.toggle_breakpoint("h1") is False)
    session.reset()
    snap = session.run_until_break()
    _check("condition halts after h1", snap.step_index == 2
           and session.hit_condition is not None
           and session.hit_condition.kind is BreakConditionKind.PROBABILITY)
    _check("reset keeps conditions", len(session.break_conditions) == 1)


# =========================================================================
# Test 4: Break conditions
# =========================================================================

def test_break_conditions():
    print("\nTest 4: Break Conditions")
    print("-" * 40)

    session = DebugSession.from_circuit(_ghz_circuit())
    session.add_break_condition(BreakCondition("entropy", 0.5))
    snap = session.run_until_break()
    _check("entropy > 0.5 after H", snap.step_index == 1)

    # Entropy never exceeds one bit on this circuit
    session.reset()
    session.remove_break_condition(0)
    session.add_break_condition(BreakCondition(BreakConditionKind.ENTANGLEMENT, 1.5))
    snap = session.run_until_break()
    _check("unmet condition runs to the end", snap.step_index == 5
           and session.is_finished and session.hit_condition is None)

    session.reset()
    session.remove_break_condition(0)
    session.add_break_condition(BreakCondition("probability", 0.4, qubit=2))
    snap = session.run_until_break()
    _check("P(q2 = 1) > 0.4 after cx12", snap.step_index == 3)

    session.reset()
    session.remove_break_condition(0)
    first = BreakCondition("probability", 0.4, "above", qubit=0)
    session.add_break_condition(first)
    session.add_break_condition(BreakCondition("entropy", 0.5))
    session.run_until_break()
    _check("first matching condition wins", session.hit_condition is first)

    try:
        BreakCondition("probability", 0.5)
        missing_qubit = False
    except ValueError:
        missing_qubit = True
    _check("probability condition needs a qubit", missing_qubit)

    try:
        session.add_break_condition(BreakCondition("probability", 0.5, qubit=3))
        out_of_range = False
    except ValueError:
        out_of_range = True
    _check("condition qubit out of range rejected", out_of_range)

    session.run_to_gate(5)
    _check("run_until_break at end completes", session.run_until_break().step_index == 5)


# =========================================================================
# Test 5: run_to_gate and request errors
# =========================================================================

def test_run_to_gate():
    print("\nTest 5: run_to_gate and Invalid Requests")
    print("-" * 40)

    qc = _ghz_circuit()
    session = DebugSession.from_circuit(qc)

    snap = session.run_to_gate(3)
    _check("forward to 3", snap.step_index == 3 and session.current_step == 3)
    _check("next gate is rz2", session.next_gate.id == "rz2")

    snap = session.run_to_gate(1)
    _check("backward to 1 by replay", snap.step_index == 1 and len(session.history) == 2)
    expected = execute_circuit(qc.sorted_gates()[:1], 3)
    _check("replayed state correct", np.allclose(snap.state, expected))

    _check("run_to_gate(current) is a no-op", session.run_to_gate(1) is session.current_snapshot)

    for bad in (-1, 6):
        try:
            session.run_to_gate(bad)
            raised = False
        except DebugRequestError:
            raised = True
        _check(f"run_to_gate({bad}) rejected", raised and session.current_step == 1)

    try:
        session.remove_break_condition(0)
        raised = False
    except DebugRequestError:
        raised = True
    _check("remove_break_condition(0) with none defined rejected", raised)
    _check("DebugRequestError is an IndexError", issubclass(DebugRequestError, IndexError))


# =========================================================================
# Test 6: Session construction
# =========================================================================

def test_session_construction():
    print("\nTest 6: Session Construction")
    print("-" * 40)

    qc = QuantumCircuit(num_qubits=2)
    qc.add("X", 1, position=3, gate_id="late")
    qc.add("H", 0, position=0, gate_id="early")
    session = DebugSession.from_circuit(qc)
    _check("gates ordered by position", [g.id for g in session.gates] == ["early", "late"])

    bad = [GateInstance("bad", "CNOT", 1, 0, control=1)]
    try:
        DebugSession(bad, 2)
        rejected = False
    except CircuitValidationError:
        rejected = True
    _check("invalid gate rejected at construction", rejected)

    session.toggle_breakpoint("missing")
    _check("unknown breakpoint id kept", "missing" in session.breakpoints)
    session.clear_breakpoints()
    _check("clear_breakpoints", not session.breakpoints)

    empty = DebugSession([], 1)
    _check("empty circuit is finished", empty.is_finished and empty.run_until_break().step_index == 0)


# =========================================================================
# Test 7: State diff
# =========================================================================

def test_state_diff():
    print("\nTest 7: State Diff")
    print("-" * 40)

    session = DebugSession.from_circuit(_ghz_circuit())
    start = session.current_snapshot
    session.run_to_gate(3)
    ghz = session.current_snapshot

    diff = DebugSession.compute_state_diff(start, ghz)
    _check("fidelity |<000|GHZ>|^2 = 0.5", abs(diff["fidelity"] - 0.5) < TOLERANCE)
    _check("entropy diff = 1", abs(diff["entropy_diff"] - 1.0) < TOLERANCE)
    _check("tvd = 0.5", abs(diff["tvd"] - 0.5) < TOLERANCE)
    labels = {d[1] for d in diff["amplitude_diffs"]}
    _check("differing amplitudes are |000> and |111>", labels == {"000", "111"},
           f"got {labels}")

    same = DebugSession.compute_state_diff(ghz, ghz)
    _check("self diff is empty", same["amplitude_diffs"] == []
           and abs(same["fidelity"] - 1.0) < TOLERANCE and same["tvd"] == 0.0)


# =========================================================================
# Main
# =========================================================================

TESTS = [
    test_round_trip,
    test_snapshot_immutability,
    test_breakpoint_precedence,
    test_break_conditions,
    test_run_to_gate,
    test_session_construction,
    test_state_diff,
]


def main():
    print("=" * 50)
    print("Quantum Debugger Test Harness")
    print("=" * 50)

    failed = 0
    for test_fn in TESTS:
        try:
            test_fn()
        except Exception:
            print(f"\n  [ERROR] {test_fn.__name__} failed:")
            traceback.print_exc()
            failed += 1

    print("\n" + "=" * 50)
    print(f"Results: {len(TESTS) - failed}/{len(TESTS)} passed, {failed} failed")
    print("ALL TESTS PASSED" if failed == 0 else "SOME TESTS FAILED")
    print("=" * 50)
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
