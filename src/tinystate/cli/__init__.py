"""Command-line interface for tinystate."""
