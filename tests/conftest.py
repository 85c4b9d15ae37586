import pytest

from fxmoney.config import reset_default_bank, reset_settings


@pytest.fixture(autouse=True)
def clean_money_settings():
    """Every test starts and ends with default settings and a fresh default bank."""
    reset_settings()
    reset_default_bank()
    yield
    reset_settings()
    reset_default_bank()
