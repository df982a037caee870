"""lockbench - Synchronization primitive benchmarking harness."""

__version__ = "0.1.0"

from .actor import CounterActor
from .config import DEFAULT_CONFIG, SIMULATED_WORK_ITERATIONS, HarnessConfig
from .containers import (
    AllocatedUnfairLockContainer,
    ContainerCategory,
    FairLockContainer,
    ReaderWriterQueueContainer,
    SerialQueueContainer,
    SynchronizedCounter,
    UnfairLockContainer,
    simulate_work,
)
from .dispatcher import AtomicCounter, OperationDispatcher, is_write_operation
from .exceptions import (
    ActorClosedError,
    BenchmarkError,
    ConfigurationError,
    InvalidOperationCountError,
)
from .harness import BenchmarkHarness, ContainerVariant, ProgressUpdate
from .locks import AllocatedUnfairLock, FairLock, ReadWriteLock, UnfairLock
from .measurement import CompletionLatch, MeasurementEngine, median_of_trials
from .results import BenchmarkReport, MeasurementResult, ResultsReporter, ScenarioSummary
from .scenarios import BATTERY_SCENARIOS, WorkloadScenario

__all__ = [
    # Scenarios and configuration
    "WorkloadScenario",
    "BATTERY_SCENARIOS",
    "HarnessConfig",
    "DEFAULT_CONFIG",
    "SIMULATED_WORK_ITERATIONS",
    # Containers and primitives
    "SynchronizedCounter",
    "FairLockContainer",
    "UnfairLockContainer",
    "AllocatedUnfairLockContainer",
    "SerialQueueContainer",
    "ReaderWriterQueueContainer",
    "CounterActor",
    "ContainerCategory",
    "simulate_work",
    "FairLock",
    "UnfairLock",
    "AllocatedUnfairLock",
    "ReadWriteLock",
    # Dispatch and measurement
    "OperationDispatcher",
    "AtomicCounter",
    "is_write_operation",
    "MeasurementEngine",
    "CompletionLatch",
    "median_of_trials",
    # Harness and reporting
    "BenchmarkHarness",
    "ContainerVariant",
    "ProgressUpdate",
    "MeasurementResult",
    "ScenarioSummary",
    "BenchmarkReport",
    "ResultsReporter",
    # Errors
    "BenchmarkError",
    "ConfigurationError",
    "InvalidOperationCountError",
    "ActorClosedError",
]
