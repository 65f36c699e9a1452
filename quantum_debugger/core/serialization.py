"""JSON save/load for quantum circuits."""

from __future__ import annotations

import json
from pathlib import Path

from quantum_debugger.engine.circuit import DEFAULT_MAX_QUBITS, QuantumCircuit


class CircuitSerializer:
    """JSON save/load for quantum circuits.

    Every gate field (id, type, wire, controls, position, parameter) is
    written, so a save/load cycle reproduces the circuit exactly.
    """

    FILE_VERSION = "1.0"
    FILE_EXTENSION = ".qcirc"

    @staticmethod
    def save(circuit: QuantumCircuit, filepath: Path | str):
        filepath = Path(filepath)
        data = circuit.to_dict()
        data["version"] = CircuitSerializer.FILE_VERSION
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def load(filepath: Path | str, max_qubits: int = DEFAULT_MAX_QUBITS) -> QuantumCircuit:
        """Load and validate a circuit; raises CircuitValidationError on bad gates."""
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if (not isinstance(data, dict) or not isinstance(data.get("gates"), list)
                or not all(isinstance(g, dict) for g in data["gates"])):
            raise ValueError(f"{filepath} is not a circuit file")
        version = data.get("version", CircuitSerializer.FILE_VERSION)
        if version != CircuitSerializer.FILE_VERSION:
            raise ValueError(f"Unsupported circuit file version {version!r}")
        return QuantumCircuit.from_dict(data, max_qubits=max_qubits)
