"""Monitoring infrastructure for SimpleIPC."""

from .metrics import MessageMetricsCollector

__all__ = ["MessageMetricsCollector"]
