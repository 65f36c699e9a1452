"""State vector engine - applies gates and circuits to state vectors.

Every function here is pure: inputs are never modified and each call
returns a freshly allocated vector. Gates act only on the amplitude pairs
or sets selected by their bit masks; all other amplitudes are copied as-is.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Generator, Iterable, Mapping

import numpy as np

from .circuit import (
    CircuitValidationError, GateInstance, QuantumCircuit, as_gate_list, sort_gates,
)
from .gates import GateKind, DEFAULT_RZ_ANGLE, QUARTER_PHASE
from .state_vector import check_state, num_qubits_of, wire_mask, zero_state

logger = logging.getLogger(__name__)

_SQRT2 = np.sqrt(2.0)


def _check_parameter(value, gate_id: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise CircuitValidationError(f"Parameter for {gate_id} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise CircuitValidationError(f"Parameter for {gate_id} is not finite: {value}")


def apply_gate(
    state: np.ndarray,
    gate: GateInstance,
    num_qubits: int | None = None,
    parameter: float | None = None,
) -> np.ndarray:
    """Apply one gate to a state, returning the new state.

    The input is checked first (length, NaN/Infinity, normalization).
    ``parameter`` overrides the gate's own parameter without touching it.
    A controlled gate missing a control, or a gate naming a wire outside
    the register, leaves the state unchanged. A non-finite angle raises
    CircuitValidationError.
    """
    n = num_qubits if num_qubits is not None else num_qubits_of(state)
    theta = parameter if parameter is not None else gate.parameter
    _check_parameter(theta, gate.id)
    data = check_state(state, n)
    return apply_gate_unchecked(data, gate, n, theta)


def execute_circuit(
    gates: QuantumCircuit | Iterable[GateInstance],
    num_qubits: int,
    parameter_overrides: Mapping[str, float] | None = None,
) -> np.ndarray:
    """Run gates from |0...0> in position order and return the final state."""
    overrides = parameter_overrides or {}
    for gate_id, value in overrides.items():
        _check_parameter(value, gate_id)
    state = zero_state(num_qubits)
    for gate in sort_gates(as_gate_list(gates)):
        theta = overrides.get(gate.id, gate.parameter)
        state = apply_gate_unchecked(state, gate, num_qubits, theta)
    return state


def run_step_by_step(
    gates: QuantumCircuit | Iterable[GateInstance],
    num_qubits: int,
) -> Generator[tuple[np.ndarray, GateInstance | None], None, None]:
    """Yields (state, gate) after each gate; the first item is the initial state."""
    state = zero_state(num_qubits)
    yield state.copy(), None
    for gate in sort_gates(as_gate_list(gates)):
        state = apply_gate_unchecked(state, gate, num_qubits, gate.parameter)
        yield state.copy(), gate


# ---- Per-kind algebra -----------------------------------------------------

def apply_gate_unchecked(
    state: np.ndarray,
    gate: GateInstance,
    n: int,
    theta: float | None,
) -> np.ndarray:
    """Apply a gate to a state already known to be well-formed."""
    if any(not 0 <= w < n for w in (gate.wire, *gate.controls)):
        logger.debug("Skipping %s: wire outside %d-qubit register", gate.label(), n)
        return state.copy()

    kind = gate.kind
    idx = np.arange(len(state))
    target = wire_mask(n, gate.wire)

    if kind is GateKind.H:
        return _hadamard(state, idx, target)
    if kind is GateKind.X:
        return _flip(state, idx, target, None)
    if kind is GateKind.Y:
        return _pauli_y(state, idx, target)
    if kind is GateKind.Z:
        return _phase(state, idx, target, None, -1.0)
    if kind is GateKind.S:
        return _phase(state, idx, target, None, 1j)
    if kind is GateKind.T:
        return _phase(state, idx, target, None, QUARTER_PHASE)
    if kind is GateKind.RZ:
        angle = DEFAULT_RZ_ANGLE if theta is None else theta
        return _phase(state, idx, target, None, np.exp(1j * angle / 2))

    if kind is GateKind.SWAP:
        return _swap_next(state, idx, n, gate.wire, None)

    # Everything below needs its control wire(s)
    if gate.control is None:
        logger.debug("Skipping %s: missing control wire", gate.label())
        return state.copy()
    ctrl = _controls_set(idx, n, gate.controls)

    if kind is GateKind.CNOT:
        return _flip(state, idx, target, ctrl)
    if kind is GateKind.CZ:
        return _phase(state, idx, target, ctrl, -1.0)
    if kind is GateKind.CPHASE:
        return _phase(state, idx, target, ctrl, QUARTER_PHASE)
    if kind is GateKind.CSWAP:
        return _swap_next(state, idx, n, gate.wire, ctrl)
    if kind is GateKind.CCX:
        if gate.control2 is None:
            logger.debug("Skipping %s: missing second control", gate.label())
            return state.copy()
        return _flip(state, idx, target, ctrl)
    raise ValueError(f"Unhandled gate kind {kind!r}")


def _controls_set(idx: np.ndarray, n: int, controls: tuple[int, ...]) -> np.ndarray:
    """Boolean selector: every listed control bit is 1."""
    selected = np.ones(len(idx), dtype=bool)
    for c in controls:
        selected &= (idx & wire_mask(n, c)) != 0
    return selected


def _hadamard(state: np.ndarray, idx: np.ndarray, target: int) -> np.ndarray:
    new = state.copy()
    lo = idx[(idx & target) == 0]
    hi = lo | target
    a, b = state[lo], state[hi]
    new[lo] = (a + b) / _SQRT2
    new[hi] = (a - b) / _SQRT2
    return new


def _flip(state: np.ndarray, idx: np.ndarray, target: int,
          ctrl: np.ndarray | None) -> np.ndarray:
    """X on the target, restricted to ctrl when given."""
    new = state.copy()
    selected = (idx & target) == 0
    if ctrl is not None:
        selected &= ctrl
    lo = idx[selected]
    hi = lo | target
    new[lo] = state[hi]
    new[hi] = state[lo]
    return new


def _pauli_y(state: np.ndarray, idx: np.ndarray, target: int) -> np.ndarray:
    new = state.copy()
    lo = idx[(idx & target) == 0]
    hi = lo | target
    a0, a1 = state[lo], state[hi]
    new[lo] = a1.imag - 1j * a1.real
    new[hi] = -a0.imag + 1j * a0.real
    return new


def _phase(state: np.ndarray, idx: np.ndarray, target: int,
           ctrl: np.ndarray | None, factor: complex) -> np.ndarray:
    """Multiply amplitudes whose target bit (and controls) are 1."""
    new = state.copy()
    selected = (idx & target) != 0
    if ctrl is not None:
        selected &= ctrl
    new[selected] *= factor
    return new


def _swap_next(state: np.ndarray, idx: np.ndarray, n: int, wire: int,
               ctrl: np.ndarray | None) -> np.ndarray:
    """Exchange `wire` with `wire + 1`, restricted to ctrl when given."""
    if wire + 1 >= n:
        logger.debug("Skipping swap on last wire %d", wire)
        return state.copy()
    first = wire_mask(n, wire)
    second = wire_mask(n, wire + 1)
    new = state.copy()
    selected = ((idx & first) != 0) & ((idx & second) == 0)
    if ctrl is not None:
        selected &= ctrl
    i = idx[selected]
    j = i ^ first ^ second
    new[i] = state[j]
    new[j] = state[i]
    return new
