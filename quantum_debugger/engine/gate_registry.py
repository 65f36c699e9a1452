"""Read-only gate catalog, built once and shared through a singleton."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .gates import GateKind, GateSpec

CATALOG_VERSION = "1.0"


class GateCatalog:
    """Singleton mapping every GateKind to its GateSpec.

    The table is fixed: there is no ``register`` hook, and lookups hand out
    frozen GateSpec objects behind a read-only mapping.
    """

    _instance: GateCatalog | None = None

    def __init__(self):
        self._specs: dict[GateKind, GateSpec] = {}
        self._register_builtins()
        self._view = MappingProxyType(self._specs)

    @classmethod
    def instance(cls) -> GateCatalog:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def version(self) -> str:
        return CATALOG_VERSION

    def _add(self, spec: GateSpec):
        self._specs[spec.kind] = spec

    def _register_builtins(self):
        # Single-qubit gates
        self._add(GateSpec(
            kind=GateKind.H, name="Hadamard", description="Creates superposition",
            matrix="1/√2 × [[1, 1], [1, -1]]", duration_ns=50))

        self._add(GateSpec(
            kind=GateKind.X, name="Pauli-X", description="Bit flip (NOT)",
            matrix="[[0, 1], [1, 0]]", duration_ns=50))

        self._add(GateSpec(
            kind=GateKind.Y, name="Pauli-Y", description="Bit & phase flip",
            matrix="[[0, -i], [i, 0]]", duration_ns=50))

        self._add(GateSpec(
            kind=GateKind.Z, name="Pauli-Z", description="Phase flip",
            matrix="[[1, 0], [0, -1]]", duration_ns=20))

        self._add(GateSpec(
            kind=GateKind.S, name="S Gate", description="π/2 phase",
            matrix="[[1, 0], [0, i]]", duration_ns=20))

        self._add(GateSpec(
            kind=GateKind.T, name="T Gate", description="π/4 phase",
            matrix="[[1, 0], [0, e^(iπ/4)]]", duration_ns=20))

        self._add(GateSpec(
            kind=GateKind.RZ, name="Rz(θ)",
            description="Z-rotation by θ (half-angle phase on |1⟩)",
            matrix="[[1, 0], [0, e^(iθ/2)]]", duration_ns=20,
            parameterized=True))

        # Controlled two-qubit gates
        self._add(GateSpec(
            kind=GateKind.CNOT, name="CNOT", description="Controlled NOT",
            matrix="[[1,0,0,0], [0,1,0,0], [0,0,0,1], [0,0,1,0]]",
            duration_ns=300, num_controls=1))

        self._add(GateSpec(
            kind=GateKind.CZ, name="CZ", description="Controlled-Z",
            matrix="[[1,0,0,0], [0,1,0,0], [0,0,1,0], [0,0,0,-1]]",
            duration_ns=300, num_controls=1))

        self._add(GateSpec(
            kind=GateKind.CPHASE, name="CPHASE", description="Controlled π/4 phase",
            matrix="[[1,0,0,0], [0,1,0,0], [0,0,1,0], [0,0,0,e^(iπ/4)]]",
            duration_ns=300, num_controls=1))

        # SWAP acts on the target wire and the next-higher wire
        self._add(GateSpec(
            kind=GateKind.SWAP, name="SWAP", description="Swap qubits",
            matrix="[[1,0,0,0], [0,0,1,0], [0,1,0,0], [0,0,0,1]]",
            duration_ns=900, num_targets=2))

        # Three-qubit gates
        self._add(GateSpec(
            kind=GateKind.CCX, name="Toffoli",
            description="Controlled-Controlled-X (3-qubit)",
            matrix="I⊗I⊗|11⟩⟨11| + X⊗|11⟩⟨11|",
            duration_ns=1200, num_controls=2))

        self._add(GateSpec(
            kind=GateKind.CSWAP, name="Fredkin",
            description="Controlled-SWAP (3-qubit)",
            matrix="I⊗I + SWAP⊗|1⟩⟨1|",
            duration_ns=1500, num_controls=1, num_targets=2))

    def get(self, kind: GateKind | str) -> GateSpec:
        return self._specs[GateKind.parse(kind)]

    @property
    def specs(self) -> Mapping[GateKind, GateSpec]:
        return self._view

    def all_gates(self) -> list[GateSpec]:
        return list(self._specs.values())

    def duration_ns(self, kind: GateKind) -> int:
        return self._specs[kind].duration_ns

    def two_qubit_kinds(self) -> frozenset[GateKind]:
        """Kinds counted as entangling (anything touching two or more wires)."""
        return frozenset(s.kind for s in self._specs.values() if s.is_multi_qubit)

    def parameterized_kinds(self) -> frozenset[GateKind]:
        return frozenset(s.kind for s in self._specs.values() if s.parameterized)

    def gate_names(self) -> list[str]:
        return [k.value for k in self._specs]
