"""Logging utilities for ORSF."""

from orsf.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
