"""Pure reconcilers turning scraped data plus stored state into write plans."""

from __future__ import annotations

from .codes import ReconcileResult, apply_reconciliation, dedupe_records, reconcile_codes
from .expired import ExpiredReconcileResult, reconcile_expired
from .links import ALL_LINKS_PRESENT, NO_NEW_LINKS, LinkUpdatePlan, plan_link_updates

__all__ = [
    "ALL_LINKS_PRESENT",
    "NO_NEW_LINKS",
    "ExpiredReconcileResult",
    "LinkUpdatePlan",
    "ReconcileResult",
    "apply_reconciliation",
    "dedupe_records",
    "plan_link_updates",
    "reconcile_codes",
    "reconcile_expired",
]
