"""Application layer for SimpleIPC."""
