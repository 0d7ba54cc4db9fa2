from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from orsf.logging import JsonFormatter, setup_logging


def test_setup_logging_writes_json_to_file(tmp_path: Path) -> None:
    target = tmp_path / "logs" / "orsf.log"
    logger = setup_logging({"logging": {"level": "debug", "output": str(target), "format": "json"}})
    assert logger.name == "orsf"
    assert logger.level == logging.DEBUG
    logging.getLogger("orsf.core.paths").warning(
        "Ignoring write.", extra={"event": "paths.unresolvable", "path": "setup.x"}
    )
    for handler in logger.handlers:
        handler.flush()
    record = json.loads(target.read_text(encoding="utf-8").splitlines()[0])
    assert record["level"] == "WARNING"
    assert record["logger"] == "orsf.core.paths"
    assert record["message"] == "Ignoring write."
    assert record["event"] == "paths.unresolvable"
    assert record["path"] == "setup.x"
    assert "timestamp" in record


def test_setup_logging_replaces_handlers(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging({"logging": {"output": "stdout", "format": "text"}})
    logger = setup_logging({"logging": {"output": "stdout", "format": "text", "level": "warning"}})
    assert len(logger.handlers) == 1
    logging.getLogger("orsf.cli").info("hidden")
    logging.getLogger("orsf.cli").warning("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "WARNING orsf.cli: shown" in out


@pytest.mark.parametrize(
    "settings",
    [{"level": "loud"}, {"format": "xml"}],
)
def test_setup_logging_rejects_unknown_settings(settings) -> None:
    with pytest.raises(ValueError):
        setup_logging({"logging": settings})


def test_json_formatter_serialises_non_json_extras() -> None:
    record = logging.LogRecord("orsf.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.context = {"path": Path("/tmp/x"), "values": (1, 2)}
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["context"] == {"path": str(Path("/tmp/x")), "values": [1, 2]}
