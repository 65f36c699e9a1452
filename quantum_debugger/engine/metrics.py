"""Circuit resource metrics derived from the gate list alone (no simulation)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .circuit import GateInstance, QuantumCircuit, as_gate_list
from .gate_registry import GateCatalog


@dataclass
class CircuitMetrics:
    """Resource metrics for a single circuit."""

    gate_count: int = 0
    depth: int = 0  # (max position) + 1
    two_qubit_gates: int = 0
    estimated_time_ns: int = 0


@dataclass
class Layer:
    position: int
    gates: list[GateInstance] = field(default_factory=list)

    @property
    def parallelism(self) -> int:
        return len(self.gates)


@dataclass
class CircuitDepthInfo:
    """Layer structure of a circuit, one layer per distinct position."""

    depth: int = 0
    layers: list[Layer] = field(default_factory=list)
    critical_path_ns: int = 0
    total_ops: int = 0
    avg_parallelism: float = 0.0


def _layers(gates: list[GateInstance]) -> list[Layer]:
    by_position: dict[int, Layer] = {}
    for gate in gates:
        by_position.setdefault(gate.position, Layer(gate.position)).gates.append(gate)
    return [by_position[p] for p in sorted(by_position)]


def _layer_time(layer: Layer, catalog: GateCatalog) -> int:
    """Gates in one layer run in parallel; the slowest one sets the pace."""
    return max(catalog.duration_ns(g.kind) for g in layer.gates)


def compute_metrics(gates: QuantumCircuit | Iterable[GateInstance]) -> CircuitMetrics:
    """Gate count, depth, entangling-gate count and estimated wall time."""
    gate_list = as_gate_list(gates)
    if not gate_list:
        return CircuitMetrics()

    catalog = GateCatalog.instance()
    multi = catalog.two_qubit_kinds()
    return CircuitMetrics(
        gate_count=len(gate_list),
        depth=max(g.position for g in gate_list) + 1,
        two_qubit_gates=sum(1 for g in gate_list if g.kind in multi),
        estimated_time_ns=sum(_layer_time(layer, catalog) for layer in _layers(gate_list)),
    )


def compute_depth_info(gates: QuantumCircuit | Iterable[GateInstance]) -> CircuitDepthInfo:
    gate_list = as_gate_list(gates)
    if not gate_list:
        return CircuitDepthInfo()

    catalog = GateCatalog.instance()
    layers = _layers(gate_list)
    return CircuitDepthInfo(
        depth=len(layers),
        layers=layers,
        critical_path_ns=sum(_layer_time(layer, catalog) for layer in layers),
        total_ops=len(gate_list),
        avg_parallelism=len(gate_list) / len(layers),
    )


def qubit_utilization(
    gates: QuantumCircuit | Iterable[GateInstance],
    num_qubits: int,
) -> list[float]:
    """Fraction of wires busy at each position 0..max."""
    gate_list = as_gate_list(gates)
    if not gate_list:
        return []
    busy: list[set[int]] = [set() for _ in range(max(g.position for g in gate_list) + 1)]
    for gate in gate_list:
        if gate.position >= 0:
            busy[gate.position].update(w for w in gate.wires() if 0 <= w < num_qubits)
    return [len(wires) / num_qubits for wires in busy]
