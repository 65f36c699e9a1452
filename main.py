"""Quantum Circuit Debugger - command-line entry point.

Usage:
    python main.py bell.qcirc --metrics --tomography
    python main.py ghz.qcirc --debug --breakpoint gate-3 --break-entropy 0.9
    python main.py qaoa.qcirc --shots 2048 --seed 7 --log-level DEBUG
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from quantum_debugger.core.config import SimulatorConfig
from quantum_debugger.core.serialization import CircuitSerializer
from quantum_debugger.engine.circuit import QuantumCircuit
from quantum_debugger.engine.gate_registry import GateCatalog
from quantum_debugger.engine.debugger import (
    BreakCondition, BreakConditionKind, Comparison, DebugSession,
)
from quantum_debugger.engine.analysis import (
    compare_with_noise, parameter_sweep, perform_tomography,
)
from quantum_debugger.engine.measurement import sample_counts
from quantum_debugger.engine.metrics import compute_depth_info, compute_metrics
from quantum_debugger.engine.simulator import run_step_by_step
from quantum_debugger.engine.state_vector import format_basis, probabilities

logger = logging.getLogger("quantum_debugger")

# --noise given without a value: use the configured rate
CONFIG_NOISE = "config"


def _noise_level(text: str) -> float:
    value = float(text)
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError(f"noise level must be in [0, 1], got {value}")
    return value


def _prob_dict(state, num_qubits: int) -> dict[str, float]:
    return {format_basis(i, num_qubits): float(p)
            for i, p in enumerate(probabilities(state)) if p > 1e-12}


def _debug_report(circuit: QuantumCircuit, args) -> dict:
    session = DebugSession.from_circuit(circuit)
    for gate_id in args.breakpoint or []:
        session.toggle_breakpoint(gate_id)
    if args.break_entropy is not None:
        session.add_break_condition(BreakCondition(
            BreakConditionKind.ENTROPY, args.break_entropy, Comparison.ABOVE))

    snap = session.run_until_break()
    return {
        "step": snap.step_index,
        "finished": session.is_finished,
        "hit_breakpoint": session.hit_breakpoint,
        "hit_condition": (session.hit_condition.kind.value
                          if session.hit_condition is not None else None),
        "entropy": snap.entropy,
        "probabilities": _prob_dict(snap.state, circuit.num_qubits),
    }


def build_report(circuit: QuantumCircuit, args, config: SimulatorConfig) -> dict:
    n = circuit.num_qubits
    steps = list(run_step_by_step(circuit, n))
    final_state = steps[-1][0]

    report: dict = {
        "num_qubits": n,
        "gate_count": circuit.gate_count(),
        "probabilities": _prob_dict(final_state, n),
        "warnings": [f"{i.gate_id}: {i.message}" for i in circuit.verify()
                     if i.severity == "warning"],
    }

    if args.trace:
        report["trace"] = [
            {"gate": gate.label() if gate is not None else None,
             "probabilities": _prob_dict(state, n)}
            for state, gate in steps
        ]

    shots = args.shots if args.shots is not None else config.default_shots
    sampled = sample_counts(final_state, shots=shots, seed=args.seed)
    report["counts"] = sampled.counts
    report["collapsed"] = sampled.collapsed

    if args.metrics:
        metrics = compute_metrics(circuit)
        depth = compute_depth_info(circuit)
        report["metrics"] = {
            "gate_count": metrics.gate_count,
            "depth": metrics.depth,
            "two_qubit_gates": metrics.two_qubit_gates,
            "estimated_time_ns": metrics.estimated_time_ns,
            "avg_parallelism": depth.avg_parallelism,
        }

    if args.tomography:
        tomo = perform_tomography(circuit, n)
        report["tomography"] = {
            "purity": tomo.purity,
            "entropy": tomo.entropy,
            "z_basis_probs": tomo.z_basis_probs.tolist(),
            "x_basis_probs": tomo.x_basis_probs.tolist(),
            "y_basis_probs": tomo.y_basis_probs.tolist(),
        }

    if args.sweep:
        swept = GateCatalog.instance().parameterized_kinds()
        if any(g.kind in swept for g in circuit.gates):
            sweep = parameter_sweep(circuit, n, num_points=config.sweep_points)
            report["sweep"] = {
                "min_energy": sweep.min_energy,
                "optimal_parameter": sweep.optimal_parameter,
                "energies": sweep.energies,
            }
        else:
            logger.warning("--sweep ignored: circuit has no parameterized gates")
            report["sweep"] = None

    if args.noise is not None:
        level = config.noise_level if args.noise == CONFIG_NOISE else args.noise
        cmp = compare_with_noise(circuit, n, noise_level=level,
                                 seed=args.seed if args.seed is not None else 0)
        report["noise"] = {
            "noise_level": level,
            "fidelity": cmp.fidelity,
            "noisy_probabilities": _prob_dict(cmp.noisy_state, n),
        }

    if args.debug or args.breakpoint or args.break_entropy is not None:
        report["debug"] = _debug_report(circuit, args)

    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Quantum circuit simulator and debugger")
    parser.add_argument("circuit", help="circuit file (.qcirc)")
    parser.add_argument("--metrics", action="store_true")
    parser.add_argument("--tomography", action="store_true")
    parser.add_argument("--debug", action="store_true",
                        help="run the debugger until a breakpoint or condition")
    parser.add_argument("--breakpoint", action="append", metavar="GATE_ID")
    parser.add_argument("--break-entropy", type=float, default=None)
    parser.add_argument("--sweep", action="store_true",
                        help="ZZ energy sweep over the RZ angle")
    parser.add_argument("--noise", type=_noise_level, nargs="?", const=CONFIG_NOISE, default=None,
                        metavar="P", help="compare against Pauli noise (default rate from config)")
    parser.add_argument("--trace", action="store_true",
                        help="include per-gate probabilities")
    parser.add_argument("--shots", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    config = SimulatorConfig.load()
    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        circuit = CircuitSerializer.load(args.circuit, max_qubits=config.max_qubits)
        report = build_report(circuit, args, config)
    except (ValueError, OSError, KeyError) as e:
        logger.error("Failed to process %s: %s", args.circuit, e, exc_info=True)
        return 1

    config.add_recent_file(args.circuit)
    try:
        config.save()
    except OSError:
        logger.warning("Could not save config to %s", config.config_path)

    print(json.dumps(report, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
