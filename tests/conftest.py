import pytest

RCP_VARS = (
    "RCP_SHARED_SECRET",
    "RCP_SHARED_SECRET_FILE",
    "RCP_USE_TIME_COMPONENT",
    "RCP_TIME_DELTA",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's .env / shell RCP_* settings out of the tests."""
    for key in RCP_VARS:
        monkeypatch.delenv(key, raising=False)
