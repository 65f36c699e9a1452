"""Derived diagnostics built on the state vector engine.

All routines re-run circuits through ``execute_circuit`` rather than
keeping a separate measurement path:

- perform_tomography: Z/X/Y basis probabilities plus a pure-state
  density matrix, its purity and an entropy proxy
- parameter_sweep: QAOA-style ZZ energy landscape over a shared angle
- compare_with_noise: ideal vs. stochastic-Pauli-noise execution
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .circuit import GateInstance, QuantumCircuit, as_gate_list, sort_gates
from .gates import GateKind
from .gate_registry import GateCatalog
from .measurement import expectation_zz
from .simulator import apply_gate_unchecked, execute_circuit
from .state_vector import probabilities, zero_state

logger = logging.getLogger(__name__)

_PURE_THRESHOLD = 0.99


@dataclass
class TomographyResult:
    """Measurement statistics in three bases for one circuit."""
    density_matrix: np.ndarray  # 2^n x 2^n complex
    purity: float
    entropy: float  # 0 for (near-)pure states, -log2(purity) otherwise
    z_basis_probs: np.ndarray
    x_basis_probs: np.ndarray
    y_basis_probs: np.ndarray


@dataclass
class ParameterSweepResult:
    parameter_values: list[float]
    energies: list[float]
    min_energy: float
    optimal_parameter: float


@dataclass
class ComparisonResult:
    """Ideal vs. noisy execution of the same circuit."""
    ideal_state: np.ndarray
    noisy_state: np.ndarray
    fidelity: float
    state_overlap: np.ndarray
    ideal_probs: np.ndarray
    noisy_probs: np.ndarray
    prob_difference: np.ndarray


def state_fidelity(psi: np.ndarray, phi: np.ndarray) -> float:
    """Fidelity between two pure state vectors: |<psi|phi>|^2."""
    return float(np.abs(np.vdot(psi, phi)) ** 2)


# ---- Tomography -------------------------------------------------------------

def perform_tomography(
    gates: QuantumCircuit | Iterable[GateInstance],
    num_qubits: int,
) -> TomographyResult:
    """Run the circuit in the Z, X and Y measurement bases.

    X basis appends H to every wire; Y basis appends S three times (S^dagger)
    then H. Because the engine only holds pure states the density matrix is
    |psi><psi| and its purity is 1 up to rounding, so this is a basis
    probability report rather than mixed-state reconstruction.
    """
    gate_list = as_gate_list(gates)
    after = max((g.position for g in gate_list), default=-1) + 1

    z_state = execute_circuit(gate_list, num_qubits)

    x_gates = list(gate_list)
    for q in range(num_qubits):
        x_gates.append(GateInstance(f"tomo-h-x-{q}", GateKind.H, q, after))
    x_state = execute_circuit(x_gates, num_qubits)

    y_gates = list(gate_list)
    for q in range(num_qubits):
        for k in range(3):
            y_gates.append(GateInstance(f"tomo-s{k + 1}-y-{q}", GateKind.S, q, after + k))
        y_gates.append(GateInstance(f"tomo-h-y-{q}", GateKind.H, q, after + 3))
    y_state = execute_circuit(y_gates, num_qubits)

    rho = np.outer(z_state, np.conj(z_state))
    purity = float(np.real(np.trace(rho @ rho)))
    purity = min(1.0, max(0.0, purity))
    if purity > _PURE_THRESHOLD:
        entropy = 0.0
    elif purity > 0:
        entropy = -math.log2(purity)
    else:
        entropy = float(num_qubits)

    return TomographyResult(
        density_matrix=rho,
        purity=purity,
        entropy=entropy,
        z_basis_probs=probabilities(z_state),
        x_basis_probs=probabilities(x_state),
        y_basis_probs=probabilities(y_state),
    )


# ---- Parameter sweep --------------------------------------------------------

def zz_energy(state: np.ndarray, num_qubits: int) -> float:
    """Negative sum of <Z_i Z_j> over all wire pairs (lower = more anti-aligned)."""
    total = 0.0
    for q1 in range(num_qubits):
        for q2 in range(q1 + 1, num_qubits):
            total += expectation_zz(state, q1, q2, num_qubits)
    return -total


def parameter_sweep(
    gates: QuantumCircuit | Iterable[GateInstance],
    num_qubits: int,
    num_points: int = 20,
    gate_ids: Iterable[str] | None = None,
) -> ParameterSweepResult:
    """Sweep a shared angle over [0, 2*pi] and record the ZZ energy.

    The angle is injected through parameter overrides, so the gates are
    never modified. By default every parameterized gate is swept.
    """
    gate_list = as_gate_list(gates)
    if gate_ids is None:
        kinds = GateCatalog.instance().parameterized_kinds()
        swept = [g.id for g in gate_list if g.kind in kinds]
    else:
        swept = list(gate_ids)
    if not swept:
        raise ValueError("Circuit has no parameterized gates to sweep")
    if num_points < 1:
        raise ValueError(f"num_points must be positive, got {num_points}")

    parameter_values: list[float] = []
    energies: list[float] = []
    for i in range(num_points + 1):
        theta = i / num_points * 2 * math.pi
        state = execute_circuit(gate_list, num_qubits, {gid: theta for gid in swept})
        parameter_values.append(theta)
        energies.append(zz_energy(state, num_qubits))

    best = int(np.argmin(energies))
    logger.debug("Sweep over %d gate(s): min energy %.6f at theta=%.4f",
                 len(swept), energies[best], parameter_values[best])
    return ParameterSweepResult(
        parameter_values=parameter_values,
        energies=energies,
        min_energy=energies[best],
        optimal_parameter=parameter_values[best],
    )


# ---- Noise comparison -------------------------------------------------------

def compare_with_noise(
    gates: QuantumCircuit | Iterable[GateInstance],
    num_qubits: int,
    noise_level: float = 0.01,
    seed: int | None = 0,
) -> ComparisonResult:
    """Compare ideal execution against one stochastic Pauli-noise trajectory.

    After each gate a random X, Y or Z hits the gate's target wire with
    probability ``noise_level`` (doubled for multi-qubit gates).
    """
    if not 0.0 <= noise_level <= 1.0:
        raise ValueError(f"noise_level must be in [0, 1], got {noise_level}")
    rng = np.random.default_rng(seed)
    gate_list = as_gate_list(gates)
    multi = GateCatalog.instance().two_qubit_kinds()
    paulis = (GateKind.X, GateKind.Y, GateKind.Z)

    ideal = execute_circuit(gate_list, num_qubits)
    noisy = zero_state(num_qubits)
    injected = 0
    for gate in sort_gates(gate_list):
        noisy = apply_gate_unchecked(noisy, gate, num_qubits, gate.parameter)
        rate = min(1.0, noise_level * 2) if gate.kind in multi else noise_level
        if rng.random() < rate:
            pauli = paulis[int(rng.integers(0, 3))]
            error = GateInstance(f"noise-{gate.id}", pauli, gate.wire, gate.position)
            noisy = apply_gate_unchecked(noisy, error, num_qubits, None)
            injected += 1
    logger.debug("Injected %d Pauli error(s) over %d gate(s)", injected, len(gate_list))

    ideal_probs = probabilities(ideal)
    noisy_probs = probabilities(noisy)
    fidelity = min(1.0, max(0.0, state_fidelity(ideal, noisy)))
    overlap = np.minimum(ideal_probs, noisy_probs) / np.maximum(
        np.maximum(ideal_probs, noisy_probs), 0.001)

    return ComparisonResult(
        ideal_state=ideal,
        noisy_state=noisy,
        fidelity=fidelity,
        state_overlap=overlap,
        ideal_probs=ideal_probs,
        noisy_probs=noisy_probs,
        prob_difference=noisy_probs - ideal_probs,
    )
