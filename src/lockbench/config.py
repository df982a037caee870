"""
Configuration management for the synchronization benchmark harness.

This module provides centralized configuration for warm-up policy, trial
repetition, scaling tiers and the worker pool used for concurrent fan-out.

Scenarios themselves are fixed policies (see ``scenarios.py``) and are not
configurable; everything here only shapes how those policies are measured.
"""

import os
from dataclasses import asdict, dataclass, field
from typing import Any

from .exceptions import ConfigurationError

# Iterations of the synthetic CPU work performed while holding a primitive.
SIMULATED_WORK_ITERATIONS = 100


def _default_worker_count() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass
class HarnessConfig:
    """Configuration for warm-up, repetition and fan-out."""

    warmup_iterations: int = 50
    trials_per_measurement: int = 3
    scaling_tiers: tuple[int, ...] = (100, 1_000, 10_000, 50_000)
    battery_operation_count: int = 50_000

    # Operation count bounds for user-selected counts
    default_operation_count: int = 10_000
    min_operation_count: int = 1_000
    max_operation_count: int = 50_000
    operation_count_step: int = 1_000

    max_workers: int = field(default_factory=_default_worker_count)
    rw_queue_workers: int = 4
    unfair_lock_spin_count: int = 64

    def validate(self) -> None:
        """
        Validate configuration parameters for consistency.

        Raises:
            ConfigurationError: If any parameter is out of range
        """
        if self.warmup_iterations < 0:
            raise ConfigurationError("warmup_iterations must be >= 0", "warmup_iterations")

        if self.trials_per_measurement < 1:
            raise ConfigurationError(
                "trials_per_measurement must be >= 1", "trials_per_measurement"
            )

        if not self.scaling_tiers or any(tier < 1 for tier in self.scaling_tiers):
            raise ConfigurationError("scaling_tiers must be positive counts", "scaling_tiers")

        if list(self.scaling_tiers) != sorted(self.scaling_tiers):
            raise ConfigurationError("scaling_tiers must be ascending", "scaling_tiers")

        if self.battery_operation_count < 1:
            raise ConfigurationError(
                "battery_operation_count must be >= 1", "battery_operation_count"
            )

        if not (
            0 < self.min_operation_count
            <= self.default_operation_count
            <= self.max_operation_count
        ):
            raise ConfigurationError(
                "operation count bounds must satisfy 0 < min <= default <= max",
                "default_operation_count",
            )

        if self.operation_count_step < 1:
            raise ConfigurationError("operation_count_step must be >= 1", "operation_count_step")

        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be >= 1", "max_workers")

        if self.rw_queue_workers < 1:
            raise ConfigurationError("rw_queue_workers must be >= 1", "rw_queue_workers")

        if self.unfair_lock_spin_count < 0:
            raise ConfigurationError(
                "unfair_lock_spin_count must be >= 0", "unfair_lock_spin_count"
            )

    def as_dict(self) -> dict[str, Any]:
        """Get configuration as a plain dictionary."""
        return asdict(self)


# Global configuration instance
DEFAULT_CONFIG = HarnessConfig()

__all__ = [
    "SIMULATED_WORK_ITERATIONS",
    "HarnessConfig",
    "DEFAULT_CONFIG",
]
