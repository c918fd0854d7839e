"""Logging for the reporter."""

from .logging import ReporterLogger

__all__ = ["ReporterLogger"]
