"""
Strava sync services.

Provides:
- StravaSyncService: full resync (connect-time and on demand)
- WebhookReconciler: incremental create/update/delete from push events
- WebhookDispatcher: acknowledge-then-process hand-off for webhook events
"""

from .service import StravaSyncService
from .webhook import WebhookReconciler, ReconcileOutcome
from .dispatcher import WebhookDispatcher

__all__ = [
    "StravaSyncService",
    "WebhookReconciler",
    "ReconcileOutcome",
    "WebhookDispatcher",
]
