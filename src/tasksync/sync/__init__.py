"""Synchronization engine: queue, dispatch, reconcile, probe."""

from .dispatcher import BatchDispatcher
from .engine import SyncEngine
from .probe import ConnectivityProbe
from .queue import MutationQueue
from .reconciler import Reconciler

__all__ = [
    "BatchDispatcher",
    "ConnectivityProbe",
    "MutationQueue",
    "Reconciler",
    "SyncEngine",
]
