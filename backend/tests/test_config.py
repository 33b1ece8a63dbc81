"""
Unit tests for core/config.py, core/exceptions.py and core/logging.py
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from valuation_engine.core.config import DEFAULT_MULTIPLES_PATH, Settings, settings
from valuation_engine.core.exceptions import (
    RatingShapeError,
    ReferenceDataError,
    ValuationEngineError,
)
from valuation_engine.core.logging import LOG_FORMAT, configure_logging, get_logger, resolve_level
from valuation_engine.valuation.multiple_resolver import MultipleResolver


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("VALUATION_MULTIPLES_PATH", "VALUATION_DEFAULT_MULTIPLE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = Settings(_env_file=None)

    assert s.VALUATION_MULTIPLES_PATH == DEFAULT_MULTIPLES_PATH
    assert DEFAULT_MULTIPLES_PATH.exists()
    assert s.VALUATION_DEFAULT_MULTIPLE == 5.0
    assert s.LOG_LEVEL == "INFO"


def test_environment_overrides(clean_env, tmp_path):
    clean_env.setenv("VALUATION_MULTIPLES_PATH", str(tmp_path / "table.json"))
    clean_env.setenv("VALUATION_DEFAULT_MULTIPLE", "6.5")

    s = Settings(_env_file=None)

    assert s.VALUATION_MULTIPLES_PATH == tmp_path / "table.json"
    assert s.VALUATION_DEFAULT_MULTIPLE == 6.5


def test_blank_multiples_path_falls_back_to_packaged_table(clean_env):
    clean_env.setenv("VALUATION_MULTIPLES_PATH", "  ")
    assert Settings(_env_file=None).VALUATION_MULTIPLES_PATH == DEFAULT_MULTIPLES_PATH


def test_home_directory_is_expanded(clean_env):
    clean_env.setenv("VALUATION_MULTIPLES_PATH", "~/multiples.json")
    assert Settings(_env_file=None).VALUATION_MULTIPLES_PATH == Path.home() / "multiples.json"


@pytest.mark.parametrize("value", ["0", "-2"])
def test_default_multiple_must_be_positive(clean_env, value):
    clean_env.setenv("VALUATION_DEFAULT_MULTIPLE", value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_resolver_picks_up_configured_default(monkeypatch, synthetic_table):
    monkeypatch.setattr(settings, "VALUATION_DEFAULT_MULTIPLE", 4.75)
    assert MultipleResolver(synthetic_table).default_multiple == 4.75


def test_exception_hierarchy():
    err = ReferenceDataError("/data/table.json", "file not found")

    assert isinstance(err, ValuationEngineError)
    assert isinstance(err, RuntimeError)
    assert issubclass(RatingShapeError, ValuationEngineError)
    assert err.message == "Failed to load multiple table from /data/table.json: file not found"
    assert err.details == {"source": "/data/table.json", "reason": "file not found"}
    assert str(err) == err.message


def test_engine_error_details_default_to_empty():
    assert RatingShapeError("bad shape").details == {}


def test_logging_helpers(caplog):
    configure_logging("debug")
    logger = get_logger("valuation_engine.tests")

    with caplog.at_level(logging.INFO, logger="valuation_engine.tests"):
        logger.info("hello")

    assert logger.name == "valuation_engine.tests"
    assert "hello" in caplog.text
    assert "%(levelname)s" in LOG_FORMAT


@pytest.mark.parametrize(
    "name, expected",
    [
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        ("ERROR", logging.ERROR),
        ("verbose", logging.INFO),
        ("", logging.INFO),
        (None, logging.INFO),
    ],
)
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected
