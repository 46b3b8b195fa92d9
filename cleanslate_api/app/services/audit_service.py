"""
Audit service for recording and querying changes.

Every accepted mutation in the service layer is written here.  The
record is appended to the store's change log and published to the
store's subscribers, which is how other parts of the process learn
that data changed.  Only administrators should have access to read
the change log.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.store import ChangeRecord, MarketplaceStore


class AuditService:
    """Service for writing and retrieving change records."""

    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store

    def log(
        self,
        actor: Optional[str],
        action: str,
        object_type: str,
        object_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> ChangeRecord:
        """Record a change and notify subscribers.

        Parameters
        ----------
        actor : Optional[str]
            ``role:id`` of whoever performed the action, or ``None`` for
            system-initiated changes.
        action : str
            Short description of the action (e.g. "create", "status").
        object_type : str
            Type of object affected (e.g. "booking", "worker").
        object_id : Optional[str]
            Identifier of the affected object, if applicable.
        details : Optional[dict]
            Additional structured data about the change.
        """
        record = ChangeRecord(
            actor=actor,
            action=action,
            object_type=object_type,
            object_id=object_id,
            details=dict(details or {}),
        )
        self.store.publish(record)
        return record

    def list_logs(
        self,
        actor: Optional[str] = None,
        object_type: Optional[str] = None,
        object_id: Optional[str] = None,
        action: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Retrieve change records with optional filters and pagination.

        Sorting is always newest first.
        """
        records = [
            r for r in self.store.changes
            if (actor is None or r.actor == actor)
            and (object_type is None or r.object_type == object_type)
            and (object_id is None or r.object_id == object_id)
            and (action is None or r.action == action)
            and (since is None or r.timestamp >= since)
        ]
        records.sort(key=lambda r: r.id, reverse=True)
        return [
            {
                "id": r.id,
                "actor": r.actor,
                "action": r.action,
                "object_type": r.object_type,
                "object_id": r.object_id,
                "timestamp": r.timestamp.isoformat(),
                "details": r.details,
            }
            for r in records[offset:offset + limit]
        ]
