"""Logging and file system helpers."""
