"""Gate kinds, immutable GateSpec definitions and reference gate matrices."""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from enum import Enum


class GateKind(Enum):
    """Closed set of gate kinds understood by the engine."""
    H = "H"
    X = "X"
    Y = "Y"
    Z = "Z"
    S = "S"
    T = "T"
    RZ = "RZ"
    CNOT = "CNOT"
    CZ = "CZ"
    CPHASE = "CPHASE"
    SWAP = "SWAP"
    CCX = "CCX"
    CSWAP = "CSWAP"

    @classmethod
    def parse(cls, value: str | GateKind) -> GateKind:
        """Resolve a kind from its tag, case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported gate kind: {value!r}") from None


@dataclass(frozen=True)
class GateSpec:
    """Immutable catalog entry for a gate kind."""
    kind: GateKind
    name: str
    description: str
    matrix: str  # symbolic, for display and code generators
    duration_ns: int
    num_controls: int = 0
    num_targets: int = 1
    parameterized: bool = False

    @property
    def num_qubits(self) -> int:
        return self.num_controls + self.num_targets

    @property
    def is_multi_qubit(self) -> bool:
        return self.num_qubits > 1


# Default RZ angle when a gate carries no parameter
DEFAULT_RZ_ANGLE = np.pi / 4

# Phase applied by T and CPHASE
QUARTER_PHASE = np.exp(1j * np.pi / 4)


# --- Reference matrices (qubit 0 = most significant bit) ---

H_MATRIX = np.array([[1, 1],
                      [1, -1]], dtype=np.complex128) / np.sqrt(2)

X_MATRIX = np.array([[0, 1],
                      [1, 0]], dtype=np.complex128)

Y_MATRIX = np.array([[0, -1j],
                      [1j, 0]], dtype=np.complex128)

Z_MATRIX = np.array([[1, 0],
                      [0, -1]], dtype=np.complex128)

S_MATRIX = np.array([[1, 0],
                      [0, 1j]], dtype=np.complex128)

T_MATRIX = np.array([[1, 0],
                      [0, QUARTER_PHASE]], dtype=np.complex128)


def rz_matrix(theta: float) -> np.ndarray:
    """Half-angle, global-phase-free Z rotation: |1> picks up e^(i*theta/2)."""
    return np.array([[1, 0],
                      [0, np.exp(1j * theta / 2)]], dtype=np.complex128)


CNOT_MATRIX = np.array([
    [1, 0, 0, 0],
    [0, 1, 0, 0],
    [0, 0, 0, 1],
    [0, 0, 1, 0]], dtype=np.complex128)

CZ_MATRIX = np.diag([1, 1, 1, -1]).astype(np.complex128)

CPHASE_MATRIX = np.diag([1, 1, 1, QUARTER_PHASE]).astype(np.complex128)

SWAP_MATRIX = np.array([
    [1, 0, 0, 0],
    [0, 0, 1, 0],
    [0, 1, 0, 0],
    [0, 0, 0, 1]], dtype=np.complex128)

# Toffoli (CCX) - 8x8, controls on the two leading qubits
TOFFOLI_MATRIX = np.eye(8, dtype=np.complex128)
TOFFOLI_MATRIX[6, 6] = 0
TOFFOLI_MATRIX[7, 7] = 0
TOFFOLI_MATRIX[6, 7] = 1
TOFFOLI_MATRIX[7, 6] = 1

# Fredkin (CSWAP) - 8x8, control on the leading qubit
FREDKIN_MATRIX = np.eye(8, dtype=np.complex128)
FREDKIN_MATRIX[5, 5] = 0
FREDKIN_MATRIX[6, 6] = 0
FREDKIN_MATRIX[5, 6] = 1
FREDKIN_MATRIX[6, 5] = 1


def reference_matrix(kind: GateKind, parameter: float | None = None) -> np.ndarray:
    """Dense unitary for a kind, ordered (controls..., targets...)."""
    if kind is GateKind.H:
        return H_MATRIX
    if kind is GateKind.X:
        return X_MATRIX
    if kind is GateKind.Y:
        return Y_MATRIX
    if kind is GateKind.Z:
        return Z_MATRIX
    if kind is GateKind.S:
        return S_MATRIX
    if kind is GateKind.T:
        return T_MATRIX
    if kind is GateKind.RZ:
        return rz_matrix(DEFAULT_RZ_ANGLE if parameter is None else parameter)
    if kind is GateKind.CNOT:
        return CNOT_MATRIX
    if kind is GateKind.CZ:
        return CZ_MATRIX
    if kind is GateKind.CPHASE:
        return CPHASE_MATRIX
    if kind is GateKind.SWAP:
        return SWAP_MATRIX
    if kind is GateKind.CCX:
        return TOFFOLI_MATRIX
    if kind is GateKind.CSWAP:
        return FREDKIN_MATRIX
    raise ValueError(f"No matrix for gate kind {kind!r}")
