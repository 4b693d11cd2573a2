"""LLM clients."""

from .client import VertexRestClient

__all__ = ["VertexRestClient"]
