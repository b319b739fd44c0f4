"""Synchronization: snapshot store, poller, mutation controller, engine."""

from minidex.sync.engine import ExchangeSync
from minidex.sync.mutations import MutationController, MutationResult
from minidex.sync.poller import Poller, PollerState
from minidex.sync.store import Snapshot, SnapshotStore

__all__ = [
    "ExchangeSync",
    "MutationController",
    "MutationResult",
    "Poller",
    "PollerState",
    "Snapshot",
    "SnapshotStore",
]
