"""Command-line interface for jxauth."""
