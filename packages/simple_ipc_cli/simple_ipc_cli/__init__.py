"""Command line peer for SimpleIPC."""

__version__ = "0.1.0"
