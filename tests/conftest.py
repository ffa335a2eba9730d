"""Common pytest configuration."""

import pytest

from lwm_io.alerts import InMemoryAlertSink
from lwm_io.backend import InMemoryLabworkBackend
from lwm_io.storage.log_sink import InMemoryLogSink
from tests.helpers.labwork_factory import build_backend


@pytest.fixture
def backend() -> InMemoryLabworkBackend:
    """Provide a backend seeded with one labwork ready for scheduling.

    Returns:
        InMemoryLabworkBackend: Seeded backend.
    """
    return build_backend()


@pytest.fixture
def log_sink() -> InMemoryLogSink:
    """Provide a fresh in-memory log sink.

    Returns:
        InMemoryLogSink: Empty sink.
    """
    return InMemoryLogSink()


@pytest.fixture
def alert_sink() -> InMemoryAlertSink:
    """Provide a fresh in-memory alert sink.

    Returns:
        InMemoryAlertSink: Empty sink.
    """
    return InMemoryAlertSink()
