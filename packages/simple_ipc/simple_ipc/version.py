"""Version information for SimpleIPC."""

__version__ = "0.1.0"
