"""Application configuration management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Persistent simulator and debugger configuration."""
    max_qubits: int = 16
    default_shots: int = 1024
    sweep_points: int = 20
    noise_level: float = 0.01
    log_level: str = "WARNING"
    recent_files: list[str] = field(default_factory=list)

    _config_dir: Path = field(
        default_factory=lambda: Path.home() / ".quantum_debugger",
        repr=False)

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def save(self):
        self._config_dir.mkdir(parents=True, exist_ok=True)
        data = {
            "max_qubits": self.max_qubits,
            "default_shots": self.default_shots,
            "sweep_points": self.sweep_points,
            "noise_level": self.noise_level,
            "log_level": self.log_level,
            "recent_files": self.recent_files[:10],  # Keep last 10
        }
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> SimulatorConfig:
        config = cls() if config_dir is None else cls(_config_dir=Path(config_dir))
        if config.config_path.exists():
            try:
                with open(config.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for key, value in data.items():
                    if hasattr(config, key) and not key.startswith('_'):
                        setattr(config, key, value)
            except (json.JSONDecodeError, OSError):
                logger.warning("Ignoring unreadable config %s", config.config_path,
                               exc_info=True)
        return config

    def add_recent_file(self, filepath: str):
        if filepath in self.recent_files:
            self.recent_files.remove(filepath)
        self.recent_files.insert(0, filepath)
        self.recent_files = self.recent_files[:10]
