"""Quantum circuit data model and construction-time validation."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Iterable

from .gates import GateKind
from .gate_registry import GateCatalog

DEFAULT_MAX_QUBITS = 16


def new_gate_id(taken: Iterable[str] = ()) -> str:
    """First "gate-N" (N = 1, 2, ...) not already in `taken`."""
    taken = set(taken)
    n = 1
    while f"gate-{n}" in taken:
        n += 1
    return f"gate-{n}"


class CircuitValidationError(ValueError):
    """Raised when a gate or circuit cannot be simulated as written."""


def _is_index(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _index_field(data: dict, key: str, required: bool = False) -> int | None:
    """Read a wire or position from a gate dict; integral floats are accepted."""
    value = data[key] if required else data.get(key)
    if value is None and not required:
        return None
    if _is_index(value):
        return int(value)
    if _is_real(value) and float(value).is_integer():
        return int(value)
    raise CircuitValidationError(f"{key} must be an integer, got {value!r}")


def _parameter_field(data: dict) -> float | None:
    value = data.get("parameter")
    if value is None:
        return None
    if not _is_real(value):
        raise CircuitValidationError(f"parameter must be a number, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class GateInstance:
    """A specific gate placed in the circuit.

    ``wire`` is the target. SWAP and CSWAP also act on ``wire + 1``.
    ``control`` / ``control2`` are required by the controlled kinds and
    must be absent otherwise; ``parameter`` is only meaningful for RZ.
    """
    id: str
    kind: GateKind
    wire: int
    position: int = 0
    control: int | None = None
    control2: int | None = None
    parameter: float | None = None

    def __post_init__(self):
        if not isinstance(self.kind, GateKind):
            object.__setattr__(self, "kind", GateKind.parse(self.kind))

    @property
    def swap_partner(self) -> int | None:
        if self.kind in (GateKind.SWAP, GateKind.CSWAP):
            return self.wire + 1
        return None

    @property
    def controls(self) -> tuple[int, ...]:
        return tuple(c for c in (self.control, self.control2) if c is not None)

    def wires(self) -> tuple[int, ...]:
        """Every wire the gate touches: target, swap partner, controls."""
        touched = [self.wire]
        if self.swap_partner is not None:
            touched.append(self.swap_partner)
        touched.extend(self.controls)
        return tuple(touched)

    def problems(self, num_qubits: int) -> list[str]:
        """All reasons this gate is invalid on num_qubits wires."""
        spec = GateCatalog.instance().get(self.kind)
        found: list[str] = []

        for name, value in (("wire", self.wire), ("position", self.position),
                            ("control", self.control), ("control2", self.control2)):
            if value is not None and not _is_index(value):
                found.append(f"{name} must be an integer, got {value!r}")
        if self.parameter is not None and not _is_real(self.parameter):
            found.append(f"parameter must be a number, got {self.parameter!r}")
        if found:
            return found

        if self.position < 0:
            found.append(f"position {self.position} is negative")
        if not 0 <= self.wire < num_qubits:
            found.append(f"target wire {self.wire} out of range [0, {num_qubits - 1}]")
        if self.swap_partner is not None and self.swap_partner >= num_qubits:
            found.append(f"{self.kind.value} needs wire {self.swap_partner} "
                         f"but the circuit has {num_qubits} qubits")

        given = self.controls
        if self.control is None and self.control2 is not None:
            found.append("control2 given without control")
        elif len(given) < spec.num_controls:
            found.append(f"{self.kind.value} requires {spec.num_controls} "
                         f"control wire(s), got {len(given)}")
        elif len(given) > spec.num_controls:
            found.append(f"{self.kind.value} takes {spec.num_controls} "
                         f"control wire(s), got {len(given)}")

        for c in given:
            if not 0 <= c < num_qubits:
                found.append(f"control wire {c} out of range [0, {num_qubits - 1}]")
            if c == self.wire or c == self.swap_partner:
                found.append(f"control wire {c} coincides with a target wire")
        if len(given) == 2 and given[0] == given[1]:
            found.append(f"both controls on wire {given[0]}")

        if self.parameter is not None:
            if not spec.parameterized:
                found.append(f"{self.kind.value} takes no parameter")
            elif not math.isfinite(self.parameter):
                found.append(f"parameter {self.parameter} is not finite")
        return found

    def validate(self, num_qubits: int) -> None:
        found = self.problems(num_qubits)
        if found:
            raise CircuitValidationError(f"Gate {self.id}: {found[0]}")

    def label(self) -> str:
        wires = ",".join(str(w) for w in (*self.controls, self.wire))
        return f"{self.kind.value}({wires})"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.kind.value,
            "wireIndex": self.wire,
            "position": self.position,
        }
        if self.control is not None:
            data["controlWire"] = self.control
        if self.control2 is not None:
            data["controlWire2"] = self.control2
        if self.parameter is not None:
            data["parameter"] = self.parameter
        return data

    @classmethod
    def from_dict(cls, data: dict) -> GateInstance:
        return cls(
            id=data.get("id") or new_gate_id(),
            kind=GateKind.parse(data["type"]),
            wire=_index_field(data, "wireIndex", required=True),
            position=_index_field(data, "position") or 0,
            control=_index_field(data, "controlWire"),
            control2=_index_field(data, "controlWire2"),
            parameter=_parameter_field(data),
        )


@dataclass(frozen=True)
class VerificationIssue:
    """A problem found by QuantumCircuit.verify()."""
    gate_id: str
    severity: str  # "error" or "warning"
    message: str


def sort_gates(gates: Iterable[GateInstance]) -> list[GateInstance]:
    """Execution order: ascending position, ties kept in insertion order."""
    return sorted(gates, key=lambda g: g.position)


def as_gate_list(source: QuantumCircuit | Iterable[GateInstance]) -> list[GateInstance]:
    if isinstance(source, QuantumCircuit):
        return list(source.gates)
    return list(source)


@dataclass
class QuantumCircuit:
    """The full circuit model - a list of gate instances on n qubits."""
    num_qubits: int = 2
    gates: list[GateInstance] = field(default_factory=list)
    max_qubits: int = DEFAULT_MAX_QUBITS

    def __post_init__(self):
        if (not _is_index(self.num_qubits)
                or self.num_qubits < 1 or self.num_qubits > self.max_qubits):
            raise CircuitValidationError(
                f"num_qubits must be 1-{self.max_qubits}, got {self.num_qubits!r}")
        if self.gates:
            for gate in self.gates:
                gate.validate(self.num_qubits)
            self.validate()

    def add_gate(self, gate: GateInstance) -> GateInstance:
        gate.validate(self.num_qubits)
        if any(g.id == gate.id for g in self.gates):
            raise CircuitValidationError(f"Duplicate gate id {gate.id!r}")
        self.gates.append(gate)
        return gate

    def add(
        self,
        kind: GateKind | str,
        wire: int,
        position: int | None = None,
        control: int | None = None,
        control2: int | None = None,
        parameter: float | None = None,
        gate_id: str | None = None,
    ) -> GateInstance:
        """Build and append a gate; position defaults to a new last column."""
        if position is None:
            position = self.get_column_count()
        return self.add_gate(GateInstance(
            id=gate_id or new_gate_id(g.id for g in self.gates),
            kind=GateKind.parse(kind),
            wire=wire,
            position=position,
            control=control,
            control2=control2,
            parameter=parameter,
        ))

    def remove_gate(self, gate_id: str) -> GateInstance | None:
        for i, g in enumerate(self.gates):
            if g.id == gate_id:
                return self.gates.pop(i)
        return None

    def get_gate(self, gate_id: str) -> GateInstance | None:
        return next((g for g in self.gates if g.id == gate_id), None)

    def get_column_count(self) -> int:
        if not self.gates:
            return 0
        return max(g.position for g in self.gates) + 1

    def sorted_gates(self) -> list[GateInstance]:
        return sort_gates(self.gates)

    def compute_layers(self) -> list[list[GateInstance]]:
        """Group gates by position, ascending, insertion order within a layer."""
        by_position: dict[int, list[GateInstance]] = {}
        for gate in self.gates:
            by_position.setdefault(gate.position, []).append(gate)
        return [by_position[p] for p in sorted(by_position)]

    def verify(self) -> list[VerificationIssue]:
        """Collect every validation problem without raising.

        Same-position gates sharing a wire are reported as warnings; the
        engine still runs them one after another in insertion order.
        """
        issues: list[VerificationIssue] = []
        seen_ids: set[str] = set()
        for gate in self.gates:
            for msg in gate.problems(self.num_qubits):
                issues.append(VerificationIssue(gate.id, "error", msg))
            if gate.id in seen_ids:
                issues.append(VerificationIssue(gate.id, "error", "duplicate gate id"))
            seen_ids.add(gate.id)

        for layer in self.compute_layers():
            claimed: dict[int, str] = {}
            for gate in layer:
                for w in gate.wires():
                    if w in claimed:
                        issues.append(VerificationIssue(
                            gate.id, "warning",
                            f"shares wire {w} with {claimed[w]} at position {gate.position}"))
                    else:
                        claimed[w] = gate.id
        return issues

    def validate(self) -> None:
        errors = [i for i in self.verify() if i.severity == "error"]
        if errors:
            first = errors[0]
            raise CircuitValidationError(f"Gate {first.gate_id}: {first.message}")

    def gate_count(self) -> int:
        return len(self.gates)

    def to_dict(self) -> dict:
        return {
            "version": "1.0",
            "num_qubits": self.num_qubits,
            "gates": [g.to_dict() for g in self.gates],
        }

    @classmethod
    def from_dict(cls, data: dict, max_qubits: int = DEFAULT_MAX_QUBITS) -> QuantumCircuit:
        circuit = cls(num_qubits=data["num_qubits"], max_qubits=max_qubits)
        gate_data = data["gates"]
        # Id-less gates take the first free "gate-N" once explicit ids are known
        taken = {g["id"] for g in gate_data if g.get("id")}
        for g_data in gate_data:
            if not g_data.get("id"):
                g_data = {**g_data, "id": new_gate_id(taken)}
                taken.add(g_data["id"])
            circuit.add_gate(GateInstance.from_dict(g_data))
        return circuit
