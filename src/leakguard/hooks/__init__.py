"""
Git hooks module.

Classifies repository hook setups and reconciles them with the scanner
invocation (native hooks or hook-manager injection).
"""

from leakguard.hooks.models import HookState, ReconciliationOutcome, ReconciliationResult, RepositoryRef, RunSummary
from leakguard.hooks.reconciler import HookReconciler
from leakguard.hooks.templates import HookTemplate

__all__ = [
    "HookReconciler",
    "HookState",
    "HookTemplate",
    "ReconciliationOutcome",
    "ReconciliationResult",
    "RepositoryRef",
    "RunSummary",
]
