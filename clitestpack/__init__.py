"""Record/replay harness internals for CLI test suites."""

__version__ = "0.1.0"
