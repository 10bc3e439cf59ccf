"""Reconciliation engine: context, appliers, sequencer and driver."""

from .context import ReconciliationContext
from .driver import ReconciliationDriver, reconcile, run
from .sequencer import ResourceKind, plan

__all__ = [
    "ReconciliationContext",
    "ReconciliationDriver",
    "ResourceKind",
    "plan",
    "reconcile",
    "run",
]
