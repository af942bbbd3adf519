import json
import logging

import pytest

from hkctl.config import ClientConfig
from hkctl.logging import JsonFormatter, configure_logging, level_for_verbosity


@pytest.mark.parametrize("verbosity,level", [(0, "WARNING"), (1, "INFO"), (2, "DEBUG"), (5, "DEBUG")])
def test_verbosity_levels(verbosity: int, level: str) -> None:
    assert level_for_verbosity(verbosity) == level


def test_configure_logging_sets_namespace_level() -> None:
    configure_logging(ClientConfig(verbosity=1))
    assert logging.getLogger("hkctl").level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("hkctl.cli", logging.INFO, __file__, 1, "Connecting", None, None)
    record.endpoint = "127.0.0.1:55123"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "Connecting"
    assert payload["logger"] == "hkctl.cli"
    assert payload["endpoint"] == "127.0.0.1:55123"
    assert "lineno" not in payload
