"""Shared fixtures for lockbench tests."""

import pytest
import structlog

from lockbench.config import HarnessConfig
from lockbench.containers import (
    AllocatedUnfairLockContainer,
    FairLockContainer,
    ReaderWriterQueueContainer,
    SerialQueueContainer,
    UnfairLockContainer,
)

CONTAINER_FACTORIES = {
    "fair_lock": FairLockContainer,
    "unfair_lock": UnfairLockContainer,
    "allocated_unfair_lock": AllocatedUnfairLockContainer,
    "serial_queue": SerialQueueContainer,
    "rw_queue": ReaderWriterQueueContainer,
}


def pytest_configure(config):
    config.addinivalue_line("markers", "fast: quick unit tests")
    config.addinivalue_line("markers", "medium: tests that spin up threads or event loops")
    config.addinivalue_line("markers", "slow: end-to-end runs of the harness")


@pytest.fixture(params=sorted(CONTAINER_FACTORIES))
def container(request):
    """Each blocking container variant, closed after the test."""
    instance = CONTAINER_FACTORIES[request.param]()
    yield instance
    instance.close()


@pytest.fixture
def small_config():
    """Configuration with a small worker pool, short warm-up and low count floor."""
    return HarnessConfig(
        warmup_iterations=5, max_workers=4, rw_queue_workers=2, min_operation_count=100
    )


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
