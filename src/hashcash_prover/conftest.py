import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    """The CLI reconfigures structlog around a stream that CliRunner closes afterwards."""
    yield
    structlog.reset_defaults()
