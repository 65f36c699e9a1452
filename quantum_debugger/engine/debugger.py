"""Quantum Circuit Debugger -- step-through execution with state inspection.

Provides forward/backward stepping over a gate-by-gate snapshot history,
breakpoints keyed by gate id, break conditions on measured quantities,
and state diff between any two snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import numpy as np

from .circuit import DEFAULT_MAX_QUBITS, GateInstance, QuantumCircuit, sort_gates
from .measurement import compute_entropy, qubit_probability
from .simulator import apply_gate_unchecked
from .state_vector import format_basis, probabilities, zero_state
from .analysis import state_fidelity

logger = logging.getLogger(__name__)


class DebugRequestError(IndexError):
    """Raised when a debugger request names a step or condition that does not exist."""


class BreakConditionKind(Enum):
    PROBABILITY = "probability"  # P(1) of one qubit
    ENTROPY = "entropy"          # Shannon entropy of the basis distribution
    # Same quantity as ENTROPY; a proxy, not an entanglement witness
    ENTANGLEMENT = "entanglement"


class Comparison(Enum):
    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class BreakCondition:
    """Halt when a measured quantity crosses a threshold (strictly)."""

    kind: BreakConditionKind
    threshold: float
    comparison: Comparison = Comparison.ABOVE
    qubit: int | None = None

    def __post_init__(self):
        if not isinstance(self.kind, BreakConditionKind):
            object.__setattr__(self, "kind", BreakConditionKind(self.kind))
        if not isinstance(self.comparison, Comparison):
            object.__setattr__(self, "comparison", Comparison(self.comparison))
        if self.kind is BreakConditionKind.PROBABILITY and self.qubit is None:
            raise ValueError("A probability condition needs a qubit")

    def measure(self, state: np.ndarray, num_qubits: int) -> float:
        if self.kind is BreakConditionKind.PROBABILITY:
            return qubit_probability(state, self.qubit, num_qubits)[1]
        return compute_entropy(state)

    def is_met(self, state: np.ndarray, num_qubits: int) -> bool:
        value = self.measure(state, num_qubits)
        if self.comparison is Comparison.ABOVE:
            return value > self.threshold
        return value < self.threshold


@dataclass(frozen=True, eq=False)
class DebugSnapshot:
    """State captured after a given number of executed gates."""

    step_index: int  # 0 for the initial state
    state: np.ndarray  # read-only
    gate: GateInstance | None  # gate that produced this state
    entropy: float
    probabilities: np.ndarray  # read-only


def _snapshot(step: int, state: np.ndarray, gate: GateInstance | None,
              entropy: float | None = None) -> DebugSnapshot:
    probs = probabilities(state)
    state.setflags(write=False)
    probs.setflags(write=False)
    return DebugSnapshot(
        step_index=step,
        state=state,
        gate=gate,
        entropy=compute_entropy(state) if entropy is None else entropy,
        probabilities=probs,
    )


class DebugSession:
    """Replayable step debugger over one circuit.

    The history always holds ``current_step + 1`` snapshots. Stepping back
    drops the newest snapshot; jumping back further replays from |0...0>.

    Usage::

        session = DebugSession(gates, num_qubits=2)
        session.step_forward()                 # after gate 0
        session.step_backward()                # back to the initial state
        session.toggle_breakpoint("gate-3")
        session.add_break_condition(BreakCondition("entropy", 0.9))
        snap = session.run_until_break()
        session.hit_breakpoint, session.hit_condition
    """

    def __init__(
        self,
        gates: Iterable[GateInstance],
        num_qubits: int,
        max_qubits: int = DEFAULT_MAX_QUBITS,
    ):
        # Validates qubit count, every gate and gate-id uniqueness
        circuit = QuantumCircuit(num_qubits=num_qubits, max_qubits=max_qubits)
        for gate in gates:
            circuit.add_gate(gate)

        self._num_qubits = num_qubits
        self._gates: tuple[GateInstance, ...] = tuple(sort_gates(circuit.gates))
        self._breakpoints: set[str] = set()
        self._conditions: list[BreakCondition] = []
        self._history: list[DebugSnapshot] = []
        self._is_running = False
        self._hit_breakpoint: str | None = None
        self._hit_condition: BreakCondition | None = None
        self.reset()

    @classmethod
    def from_circuit(cls, circuit: QuantumCircuit) -> DebugSession:
        return cls(circuit.gates, circuit.num_qubits, circuit.max_qubits)

    # ---- Read access ------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def gates(self) -> tuple[GateInstance, ...]:
        return self._gates

    @property
    def gate_count(self) -> int:
        return len(self._gates)

    @property
    def current_step(self) -> int:
        return len(self._history) - 1

    @property
    def history(self) -> tuple[DebugSnapshot, ...]:
        return tuple(self._history)

    @property
    def current_snapshot(self) -> DebugSnapshot:
        return self._history[-1]

    @property
    def next_gate(self) -> GateInstance | None:
        if self.is_finished:
            return None
        return self._gates[self.current_step]

    @property
    def is_finished(self) -> bool:
        return self.current_step >= len(self._gates)

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def hit_breakpoint(self) -> str | None:
        return self._hit_breakpoint

    @property
    def hit_condition(self) -> BreakCondition | None:
        return self._hit_condition

    @property
    def breakpoints(self) -> frozenset[str]:
        return frozenset(self._breakpoints)

    @property
    def break_conditions(self) -> tuple[BreakCondition, ...]:
        return tuple(self._conditions)

    def qubit_probability(self, qubit: int) -> tuple[float, float]:
        """(P(0), P(1)) of a qubit in the current snapshot."""
        return qubit_probability(self.current_snapshot.state, qubit, self._num_qubits)

    # ---- Stepping ---------------------------------------------------------

    def reset(self) -> None:
        """Back to |0...0>; breakpoints and conditions are kept."""
        self._history = [_snapshot(0, zero_state(self._num_qubits), None, entropy=0.0)]
        self._clear_halt()

    def _clear_halt(self) -> None:
        self._hit_breakpoint = None
        self._hit_condition = None

    def step_forward(self) -> DebugSnapshot | None:
        """Execute the next gate. Returns the new snapshot, or None at the end."""
        self._clear_halt()
        if self.is_finished:
            logger.debug("step_forward ignored: all %d gates executed", len(self._gates))
            return None
        gate = self._gates[self.current_step]
        state = apply_gate_unchecked(self.current_snapshot.state, gate,
                                     self._num_qubits, gate.parameter)
        snap = _snapshot(self.current_step + 1, state, gate)
        self._history.append(snap)
        return snap

    def step_backward(self) -> DebugSnapshot | None:
        """Drop the newest snapshot. Returns the new current one, or None at step 0."""
        self._clear_halt()
        if self.current_step == 0:
            logger.debug("step_backward ignored: already at the initial state")
            return None
        self._history.pop()
        return self.current_snapshot

    def run_to_gate(self, target: int) -> DebugSnapshot:
        """Move to the state after `target` gates have executed.

        Going forward steps from the current state; going backward replays
        from the initial state.
        """
        if not 0 <= target <= len(self._gates):
            raise DebugRequestError(
                f"Step {target} out of range [0, {len(self._gates)}]")
        self._clear_halt()
        if target < self.current_step:
            self.reset()
        while self.current_step < target:
            self.step_forward()
        return self.current_snapshot

    def run_until_break(self) -> DebugSnapshot:
        """Run until a breakpoint, a satisfied condition, or the end.

        A breakpoint halts before its gate executes; conditions are checked
        after each executed gate, first match wins.
        """
        self._clear_halt()
        self._is_running = True
        try:
            while not self.is_finished:
                gate = self._gates[self.current_step]
                if gate.id in self._breakpoints:
                    self._hit_breakpoint = gate.id
                    logger.debug("Breakpoint hit before %s at step %d",
                                 gate.id, self.current_step)
                    break

                snap = self.step_forward()
                met = next((c for c in self._conditions
                            if c.is_met(snap.state, self._num_qubits)), None)
                if met is not None:
                    self._hit_condition = met
                    logger.debug("Condition %s hit at step %d", met, snap.step_index)
                    break
        finally:
            self._is_running = False
        return self.current_snapshot

    # ---- Breakpoints and conditions ---------------------------------------

    def toggle_breakpoint(self, gate_id: str) -> bool:
        """Toggle the breakpoint on a gate. Returns True if now set."""
        if gate_id in self._breakpoints:
            self._breakpoints.discard(gate_id)
            return False
        if not any(g.id == gate_id for g in self._gates):
            logger.debug("Breakpoint set on unknown gate id %r", gate_id)
        self._breakpoints.add(gate_id)
        return True

    def clear_breakpoints(self) -> None:
        self._breakpoints.clear()

    def add_break_condition(self, condition: BreakCondition) -> None:
        if (condition.qubit is not None
                and not 0 <= condition.qubit < self._num_qubits):
            raise ValueError(
                f"Condition qubit {condition.qubit} out of range "
                f"[0, {self._num_qubits - 1}]")
        self._conditions.append(condition)

    def remove_break_condition(self, index: int) -> BreakCondition:
        if not 0 <= index < len(self._conditions):
            raise DebugRequestError(
                f"No break condition at index {index} "
                f"({len(self._conditions)} defined)")
        return self._conditions.pop(index)

    # ---- State diff -------------------------------------------------------

    @staticmethod
    def compute_state_diff(
        snap_a: DebugSnapshot,
        snap_b: DebugSnapshot,
        top: int = 10,
    ) -> dict:
        """Compare two debug snapshots.

        Returns a dict with:
            fidelity: float - |<a|b>|^2
            tvd: float - total variation distance of probability distributions
            amplitude_diffs: list of (index, bitstring, amp_a, amp_b, |diff|)
                for the top differing amplitudes
            entropy_diff: float - entropy(b) - entropy(a)
            prob_diffs: np.ndarray - |P(a) - P(b)| per basis state
        """
        data_a = snap_a.state
        data_b = snap_b.state
        if data_a.shape != data_b.shape:
            raise ValueError("Snapshots come from registers of different size")
        n = len(data_a).bit_length() - 1

        prob_diffs = np.abs(snap_a.probabilities - snap_b.probabilities)
        amp_diffs = np.abs(data_a - data_b)
        top_indices = np.argsort(amp_diffs)[::-1][:min(top, len(amp_diffs))]

        amplitude_diffs = []
        for idx in top_indices:
            if amp_diffs[idx] < 1e-10:
                break
            amplitude_diffs.append((
                int(idx),
                format_basis(int(idx), n),
                complex(data_a[idx]),
                complex(data_b[idx]),
                float(amp_diffs[idx]),
            ))

        return {
            "fidelity": state_fidelity(data_a, data_b),
            "tvd": float(0.5 * np.sum(prob_diffs)),
            "amplitude_diffs": amplitude_diffs,
            "entropy_diff": snap_b.entropy - snap_a.entropy,
            "prob_diffs": prob_diffs,
        }
