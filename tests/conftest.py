"""
Test configuration for the icao-mrz test suite.
"""

import logging
from datetime import date

import pytest

from icao_mrz.config import MRZSettings, get_settings

# Specimens from ICAO Doc 9303 Parts 4-7
TD1_SPECIMEN = (
    "I<UTOD231458907<<<<<<<<<<<<<<<\n"
    "7408122F1204159UTO<<<<<<<<<<<6\n"
    "ERIKSSON<<ANNA<MARIA<<<<<<<<<<"
)
TD2_SPECIMEN = (
    "I<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<\n"
    "D231458907UTO7408122F1204159<<<<<<<6"
)
TD3_SPECIMEN = (
    "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\n"
    "L898902C36UTO7408122F1204159ZE184226B<<<<<10"
)
MRV_A_SPECIMEN = (
    "V<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\n"
    "L8988901C4XXX4009078F96121096ZE184226B<<<<<<"
)
MRV_B_SPECIMEN = (
    "V<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<\n"
    "L8988901C4XXX4009078F9612109<<<<<<<<"
)

# Citizen card with letters printed in place of digits in the number
PORTUGAL_ID = (
    "I<PRTO0I234567ZZS<<<<<<<<<<<<<\n"
    "7408122F1204159PRT<<<<<<<<<<<1\n"
    "SILVA<<JOAO<PEDRO<<<<<<<<<<<<<"
)
FRANCE_ID = (
    "IDFRAABCD123677<<<<<<<<<<<<<<<\n"
    "8001014M3001019FRA<<<<<<<<<<<8\n"
    "MARTIN<<CLAIRE<<<<<<<<<<<<<<<<"
)

REFERENCE_DATE = date(2026, 10, 19)


def pytest_collection_modifyitems(config, items):
    """Add markers based on location and name."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "mrz" in str(item.fspath) or "mrz" in item.name.lower():
            item.add_marker(pytest.mark.mrz)


@pytest.fixture(autouse=True)
def clean_settings_cache(monkeypatch):
    """Keep MRZ_* variables from the developer's shell out of the tests."""
    for name in ("MRZ_LOG_LEVEL", "MRZ_LINE_SEPARATOR", "MRZ_BIRTH_YEAR_TOLERANCE", "MRZ_EXPIRY_YEAR_LOOKBACK"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by setup_logging."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def today():
    return REFERENCE_DATE


@pytest.fixture
def settings():
    return MRZSettings(_env_file=None)


@pytest.fixture
def td1_mrz():
    return TD1_SPECIMEN


@pytest.fixture
def td2_mrz():
    return TD2_SPECIMEN


@pytest.fixture
def td3_mrz():
    return TD3_SPECIMEN


@pytest.fixture
def mrv_a_mrz():
    return MRV_A_SPECIMEN


@pytest.fixture
def mrv_b_mrz():
    return MRV_B_SPECIMEN


@pytest.fixture
def portugal_mrz():
    return PORTUGAL_ID


@pytest.fixture
def france_mrz():
    return FRANCE_ID
