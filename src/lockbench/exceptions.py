"""
Benchmark Harness Exception Hierarchy

Exceptions raised at the edges of the harness: configuration, operation
count selection and use of a stopped actor. Nothing in the measured path
raises these; failures there propagate unchanged.
"""


class BenchmarkError(Exception):
    """Base exception for all harness errors."""

    def __init__(self, message: str, error_code: str = "BENCHMARK_GENERAL_ERROR"):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


class ConfigurationError(BenchmarkError):
    """
    Raised when a HarnessConfig fails validation.

    Recovery: fix the offending field and rebuild the harness.
    """

    def __init__(self, message: str, field_name: str):
        super().__init__(message, "INVALID_CONFIGURATION")
        self.field_name = field_name


class InvalidOperationCountError(BenchmarkError):
    """
    Raised when a requested operation count is outside the allowed range.

    Recovery: choose a count between the configured minimum and maximum.
    """

    def __init__(self, message: str, operation_count: int):
        super().__init__(message, "INVALID_OPERATION_COUNT")
        self.operation_count = operation_count


class ActorClosedError(BenchmarkError):
    """Raised when an operation is sent to a CounterActor that has been closed."""

    def __init__(self, message: str = "CounterActor is closed"):
        super().__init__(message, "ACTOR_CLOSED")
