"""Command-line tools for shelfscan."""
