import pytest

from labreport.config import RetryPolicy


@pytest.fixture(autouse=True)
def _no_tracing(monkeypatch):
    """Keep Langfuse out of every test run."""
    monkeypatch.setenv("LANGFUSE_ENABLED", "false")


@pytest.fixture
def fast_retry():
    """Retry policy without waits."""
    return RetryPolicy(max_tries=3, factor=0, max_value=0, jitter=False)
