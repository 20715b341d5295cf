"""Command-line interface for leakguard."""
