"""Utility helpers shared across vecstore modules."""

from .logger import JSONFormatter, get_logger

__all__ = ["JSONFormatter", "get_logger"]
