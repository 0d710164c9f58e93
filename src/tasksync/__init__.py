"""Offline-first task store with batched synchronization."""

__version__ = "0.1.0"
