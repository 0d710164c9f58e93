"""Command line operations."""
