from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from orsf.core.document import SetupDocument  # noqa: E402

from tests.helpers import build_document, build_full_document  # noqa: E402


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture(autouse=True)
def reset_orsf_logger() -> None:
    """Undo ``setup_logging`` so ``caplog`` keeps seeing ``orsf`` records."""

    yield
    logger = logging.getLogger("orsf")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def minimal_document() -> SetupDocument:
    return build_document()


@pytest.fixture
def full_document() -> SetupDocument:
    return build_full_document()
