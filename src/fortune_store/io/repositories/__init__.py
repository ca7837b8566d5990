"""Repositories over the instrumented database handle."""

from .fortune_repository import FortuneRepository

__all__ = ["FortuneRepository"]
