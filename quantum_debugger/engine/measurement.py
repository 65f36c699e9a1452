"""Measurement statistics and sampling for state vectors."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .state_vector import format_basis, num_qubits_of, probabilities, wire_mask


@dataclass
class MeasurementResult:
    """Outcome of sampling a state over many shots."""
    shots: int
    counts: dict[str, int]
    collapsed: str  # most frequent bitstring


def compute_entropy(state: np.ndarray) -> float:
    """Shannon entropy (bits) of the basis-state distribution.

    This is a classical distribution entropy, not a von Neumann entropy:
    it is 0 for a basis state and n for the uniform superposition, and is
    used as a rough entanglement proxy by the debugger.
    """
    probs = probabilities(state)
    total = probs.sum()
    if total <= 0:
        return 0.0
    probs = probs / total
    nonzero = probs[probs > 0]
    return float(-np.sum(nonzero * np.log2(nonzero)))


def _z_signs(dim: int, num_qubits: int, qubit: int) -> np.ndarray:
    """+1 where the qubit's bit is 0, -1 where it is 1."""
    idx = np.arange(dim)
    return np.where((idx & wire_mask(num_qubits, qubit)) == 0, 1.0, -1.0)


def expectation_z(state: np.ndarray, qubit: int, num_qubits: int | None = None) -> float:
    """<Z> on one qubit."""
    n = num_qubits if num_qubits is not None else num_qubits_of(state)
    return float(np.sum(probabilities(state) * _z_signs(len(state), n, qubit)))


def expectation_zz(state: np.ndarray, qubit_a: int, qubit_b: int,
                   num_qubits: int | None = None) -> float:
    """<Z_a Z_b> correlator, the QAOA/VQE cost term."""
    n = num_qubits if num_qubits is not None else num_qubits_of(state)
    signs = _z_signs(len(state), n, qubit_a) * _z_signs(len(state), n, qubit_b)
    return float(np.sum(probabilities(state) * signs))


def qubit_probability(state: np.ndarray, qubit: int,
                      num_qubits: int | None = None) -> tuple[float, float]:
    """(P(0), P(1)) for a single qubit."""
    n = num_qubits if num_qubits is not None else num_qubits_of(state)
    idx = np.arange(len(state))
    prob1 = float(np.sum(probabilities(state)[(idx & wire_mask(n, qubit)) != 0]))
    return 1.0 - prob1, prob1


def sample_counts(
    state: np.ndarray,
    shots: int = 1024,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> MeasurementResult:
    """Sample `shots` computational-basis outcomes without collapsing the state.

    Uses numpy multinomial sampling; a seed (or a pre-seeded Generator,
    which takes precedence) makes the counts reproducible.
    """
    if shots < 1:
        raise ValueError(f"shots must be positive, got {shots}")
    rng = rng or np.random.default_rng(seed)
    n = num_qubits_of(state)
    probs = probabilities(state)
    total = probs.sum()
    if total > 1e-15:
        probs = probs / total
    else:
        probs = np.ones_like(probs) / len(probs)

    counts_array = rng.multinomial(shots, probs)
    counts = {format_basis(i, n): int(c)
              for i, c in enumerate(counts_array) if c > 0}
    # argmax returns the first maximum, i.e. lowest basis index on ties
    collapsed = format_basis(int(np.argmax(counts_array)), n)
    return MeasurementResult(shots=shots, counts=counts, collapsed=collapsed)
