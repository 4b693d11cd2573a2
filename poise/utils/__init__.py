"""Utility modules for logging and numeric helpers."""

from .logging import setup_logging
from .numbers import round_half_up, clamp

__all__ = ["setup_logging", "round_half_up", "clamp"]
