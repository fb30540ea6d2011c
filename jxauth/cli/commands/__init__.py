"""Command modules for the jxauth CLI."""
