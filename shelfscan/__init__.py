"""shelfscan - quota-disciplined, never-failing book inference orchestration."""

__version__ = "0.1.0"
