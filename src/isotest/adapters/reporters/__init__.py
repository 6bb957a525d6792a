"""Reporter adapters: Rich console output and an in-memory recorder."""

from .console import ConsoleReporter
from .memory import RecordingReporter

__all__ = ["ConsoleReporter", "RecordingReporter"]
