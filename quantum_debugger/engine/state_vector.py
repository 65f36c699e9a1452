"""State vector construction, bit-convention helpers and sanity checks.

A state is a 1-D complex128 numpy array of length 2^n. Qubit 0 is the
most significant bit: qubit w of basis index i is ``(i >> (n-1-w)) & 1``.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_NORM_TOLERANCE = 1e-9


class StateVectorError(ValueError):
    """Raised for a state vector that cannot be simulated."""


def zero_state(num_qubits: int) -> np.ndarray:
    """|00...0> on num_qubits qubits."""
    if num_qubits < 1:
        raise StateVectorError(f"num_qubits must be positive, got {num_qubits}")
    data = np.zeros(2 ** num_qubits, dtype=np.complex128)
    data[0] = 1.0 + 0.0j
    return data


def basis_state(bits: str | list[int]) -> np.ndarray:
    """Computational basis state from a bitstring like '010' or [0, 1, 0]."""
    bits = [int(b) for b in bits]
    n = len(bits)
    index = 0
    for i, bit in enumerate(bits):
        if bit not in (0, 1):
            raise StateVectorError(f"Basis bits must be 0 or 1, got {bit}")
        if bit:
            index |= (1 << (n - 1 - i))
    data = np.zeros(2 ** n, dtype=np.complex128)
    data[index] = 1.0 + 0.0j
    return data


def wire_mask(num_qubits: int, wire: int) -> int:
    """Bit mask selecting `wire` in a basis index."""
    return 1 << (num_qubits - 1 - wire)


def num_qubits_of(state: np.ndarray) -> int:
    dim = len(state)
    n = dim.bit_length() - 1
    if dim < 2 or (1 << n) != dim:
        raise StateVectorError(f"State length {dim} is not a power of two")
    return n


def probabilities(state: np.ndarray) -> np.ndarray:
    """|amplitude|^2 for each basis state."""
    return np.abs(state) ** 2


def state_norm(state: np.ndarray) -> float:
    return float(np.sqrt(np.sum(np.abs(state) ** 2)))


def check_state(
    state: np.ndarray,
    num_qubits: int,
    tolerance: float = DEFAULT_NORM_TOLERANCE,
) -> np.ndarray:
    """Validate an externally supplied state, returning a safe copy.

    Rejects a wrong length, NaN/Infinity, and a zero vector. A squared norm
    drifting from 1 by more than ``tolerance`` is re-normalized.
    """
    data = np.asarray(state, dtype=np.complex128)
    if data.shape != (2 ** num_qubits,):
        raise StateVectorError(
            f"Expected shape ({2 ** num_qubits},), got {data.shape}")
    if not np.all(np.isfinite(data)):
        raise StateVectorError("State vector contains NaN or Infinity")

    norm_sq = float(np.sum(np.abs(data) ** 2))
    if norm_sq < 1e-30:
        raise StateVectorError("State vector has zero norm")
    if abs(norm_sq - 1.0) > tolerance:
        logger.warning("Re-normalizing state with squared norm %.12f", norm_sq)
        return data / np.sqrt(norm_sq)
    return data.copy()


def format_basis(index: int, num_qubits: int) -> str:
    """Bitstring label for a basis index, qubit 0 first."""
    return format(index, f"0{num_qubits}b")


def state_to_pairs(state: np.ndarray) -> list[tuple[float, float]]:
    """Plain (real, imag) pairs for callers outside numpy."""
    return [(float(a.real), float(a.imag)) for a in state]
