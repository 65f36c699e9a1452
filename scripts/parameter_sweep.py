"""Parameter sweep -- ZZ energy landscape of an RZ-parameterized circuit.

Usage:
    python scripts/parameter_sweep.py --circuit qaoa2 --points 40
    python scripts/parameter_sweep.py --circuit ghz3 --noise 0.05 --seed 7 --output sweep.json
"""

from __future__ import annotations

import argparse
import json
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from quantum_debugger.engine.circuit import QuantumCircuit
from quantum_debugger.engine.analysis import compare_with_noise, parameter_sweep


# ---- Predefined circuits --------------------------------------------------

def _bell_circuit() -> QuantumCircuit:
    c = QuantumCircuit(2)
    c.add("H", 0, position=0, gate_id="h0")
    c.add("CNOT", 1, position=1, control=0, gate_id="cx01")
    c.add("RZ", 1, position=2, gate_id="rz1")
    return c


def _ghz3_circuit() -> QuantumCircuit:
    c = QuantumCircuit(3)
    c.add("H", 0, position=0, gate_id="h0")
    c.add("CNOT", 1, position=1, control=0, gate_id="cx01")
    c.add("CNOT", 2, position=2, control=1, gate_id="cx12")
    for q in range(3):
        c.add("RZ", q, position=3, gate_id=f"rz{q}")
    return c


def _qaoa2_circuit() -> QuantumCircuit:
    # Each wire runs H-RZ(theta)-H, so <Z0 Z1> = cos^2(theta/2)
    c = QuantumCircuit(2)
    for q in range(2):
        c.add("H", q, position=0, gate_id=f"h{q}")
        c.add("RZ", q, position=1, gate_id=f"rz{q}")
        c.add("H", q, position=2, gate_id=f"mix{q}")
    return c


CIRCUITS = {
    "bell": _bell_circuit,
    "ghz3": _ghz3_circuit,
    "qaoa2": _qaoa2_circuit,
}


def main():
    parser = argparse.ArgumentParser(description="RZ parameter sweep experiment")
    parser.add_argument("--circuit", choices=list(CIRCUITS.keys()), default="qaoa2")
    parser.add_argument("--points", type=int, default=20)
    parser.add_argument("--noise", type=float, default=None,
                        help="also compare ideal vs. noisy execution at this rate")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output", type=str, default=None)
    args = parser.parse_args()

    circuit = CIRCUITS[args.circuit]()
    print(f"Running parameter sweep: circuit={args.circuit}, points={args.points}")

    sweep = parameter_sweep(circuit, circuit.num_qubits, num_points=args.points)

    output = {
        "experiment": "parameter_sweep",
        "circuit": args.circuit,
        "num_points": args.points,
        "min_energy": sweep.min_energy,
        "optimal_parameter": sweep.optimal_parameter,
        "results": [
            {"theta": theta, "energy": energy}
            for theta, energy in zip(sweep.parameter_values, sweep.energies)
        ],
    }

    if args.noise is not None:
        cmp = compare_with_noise(circuit, circuit.num_qubits,
                                 noise_level=args.noise, seed=args.seed)
        output["noise"] = {
            "noise_level": args.noise,
            "seed": args.seed,
            "fidelity": cmp.fidelity,
            "prob_difference": cmp.prob_difference.tolist(),
        }

    if args.output:
        with open(args.output, "w") as f:
            json.dump(output, f, indent=2)
        print(f"Results saved to {args.output}")
    else:
        print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
