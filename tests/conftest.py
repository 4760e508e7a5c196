import pytest

from app_harness import Logger

HARNESS_ENV_VARS = (
    "SOURCE_FILE",
    "OUTPUT_FILE",
    "ERROR_FILE",
    "CONFIGURATION",
    "CONFIGURATION_FILE",
    "PRINT_CONFIGURATION",
    "MASK_SETTING_IDS",
    "LOG_LEVEL_SDK",
    "CLEAR_OUTPUT",
    "APP_ARTIFACTS_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without harness variables from the outer environment."""
    for name in HARNESS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def logger(capsys):
    """DEBUG logger writing to the captured stdout, startup line discarded."""
    instance = Logger("DEBUG", rich_tracebacks=False)
    capsys.readouterr()
    return instance
