"""Emotion recognition clients."""

from .hume import HumeBatchClient

__all__ = ["HumeBatchClient"]
