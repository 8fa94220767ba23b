"""Collectors for the local OS identity."""

from .base import BaseCollector

__all__ = ["BaseCollector"]
