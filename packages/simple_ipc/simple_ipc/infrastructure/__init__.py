"""Infrastructure layer for SimpleIPC."""
