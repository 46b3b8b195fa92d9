"""
Business logic for workers: applications, status lifecycle,
onboarding checklist, profile and availability calendar.

Administrators move a worker along ``WORKER_TRANSITIONS``.  Two rules
keep the ``training_verified`` flag honest:

* forcing a worker to ``Active`` completes every onboarding step and
  verifies their training;
* completing the last onboarding step while the worker is
  ``TrainingPending`` or ``PendingApproval`` advances them to
  ``OnboardingComplete`` automatically.

After every onboarding mutation ``training_verified`` is recomputed as
"status is Active or every step is complete".
"""

import logging
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..core.config import settings
from ..core.errors import IllegalTransitionError, NotFoundError, VersionConflictError
from ..core.store import MarketplaceStore, Worker, default_onboarding_steps, new_id
from ..schemas.worker import WorkerCreate, WorkerRead, WorkerStatus, WorkerUpdate
from .audit_service import AuditService


logger = logging.getLogger(__name__)

W = WorkerStatus

WORKER_TRANSITIONS: Dict[WorkerStatus, FrozenSet[WorkerStatus]] = {
    W.PENDING_APPLICATION: frozenset({W.PENDING_APPROVAL, W.REJECTED}),
    W.PENDING_APPROVAL: frozenset({W.TRAINING_PENDING, W.ACTIVE, W.REJECTED}),
    W.TRAINING_PENDING: frozenset({W.ACTIVE, W.REJECTED}),
    W.ONBOARDING_COMPLETE: frozenset({W.ACTIVE}),
    W.ACTIVE: frozenset({W.SUSPENDED}),
    W.SUSPENDED: frozenset({W.ACTIVE}),
    W.REJECTED: frozenset({W.PENDING_APPLICATION}),
}

# Statuses from which a fully completed checklist promotes the worker.
AUTO_ADVANCE_FROM = frozenset({W.TRAINING_PENDING, W.PENDING_APPROVAL})


def sync_onboarding_state(worker: Worker) -> bool:
    """Apply the auto-advance rule and recompute ``training_verified``.

    Returns True when the worker was promoted to ``OnboardingComplete``.
    The caller must hold the worker's lock.
    """
    all_complete = all(step.completed for step in worker.onboarding_steps)
    promoted = False
    if all_complete and worker.status in AUTO_ADVANCE_FROM:
        worker.status = W.ONBOARDING_COMPLETE
        promoted = True
    worker.training_verified = worker.status == W.ACTIVE or all_complete
    return promoted


class WorkerService:
    """Service for managing workers."""

    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store
        self.audit = AuditService(store)

    def _get(self, worker_id: str) -> Worker:
        worker = self.store.workers.get(worker_id)
        if worker is None:
            raise NotFoundError(f"Worker {worker_id} not found")
        return worker

    @staticmethod
    def _check_version(worker: Worker, expected_version: Optional[int]) -> None:
        if expected_version is not None and worker.version != expected_version:
            raise VersionConflictError(
                f"Worker {worker.id} is at version {worker.version}, not {expected_version}"
            )

    def get_worker(self, worker_id: str) -> WorkerRead:
        return WorkerRead.model_validate(self._get(worker_id))

    def list_workers(self, statuses: Optional[Iterable[WorkerStatus]] = None) -> List[WorkerRead]:
        wanted = set(statuses) if statuses else None
        workers = [w for w in self.store.workers.values() if wanted is None or w.status in wanted]
        workers.sort(key=lambda w: (w.full_name.lower(), w.created_at))
        return [WorkerRead.model_validate(w) for w in workers]

    def register_worker(self, data: WorkerCreate, actor: Optional[str] = None) -> WorkerRead:
        """Create a worker from an application.

        New workers start in ``PendingApproval`` with the default hourly
        rate, the standard onboarding checklist and no training modules.
        """
        worker = Worker(
            id=new_id(),
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            id_number=data.id_number,
            services_offered=list(data.services_offered),
            experience=data.experience,
            bank_account_number=data.bank_account_number,
            bank_name=data.bank_name,
            branch_code=data.branch_code,
            hourly_rate_cents=settings.default_hourly_rate_cents,
            status=W.PENDING_APPROVAL,
            onboarding_steps=default_onboarding_steps(),
        )
        self.store.workers[worker.id] = worker
        logger.info("Worker application %s received from %s", worker.id, worker.email)
        self.audit.log(actor=actor, action="create", object_type="worker", object_id=worker.id)
        return WorkerRead.model_validate(worker)

    def update_status(
        self,
        worker_id: str,
        new_status: WorkerStatus,
        actor: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> WorkerRead:
        """Move a worker along the lifecycle.

        Raises ``IllegalTransitionError`` for a change not present in
        ``WORKER_TRANSITIONS``.  Forcing ``Active`` completes the
        onboarding checklist and verifies training.
        """
        with self.store.locked(worker_id):
            worker = self._get(worker_id)
            self._check_version(worker, expected_version)
            previous = worker.status
            if new_status not in WORKER_TRANSITIONS.get(previous, frozenset()):
                logger.warning("Rejected worker %s transition %s -> %s", worker_id, previous.value, new_status.value)
                raise IllegalTransitionError(
                    f"Invalid worker transition: {previous.value} -> {new_status.value}"
                )
            worker.status = new_status
            if new_status == W.ACTIVE:
                for step in worker.onboarding_steps:
                    step.completed = True
            sync_onboarding_state(worker)
            self.store.touch(worker)
            snapshot = WorkerRead.model_validate(worker)

        logger.info("Worker %s status %s -> %s", worker_id, previous.value, snapshot.status.value)
        self.audit.log(
            actor=actor,
            action="status",
            object_type="worker",
            object_id=worker_id,
            details={"from": previous.value, "to": snapshot.status.value},
        )
        return snapshot

    def update_onboarding_step(
        self,
        worker_id: str,
        step_id: str,
        completed: bool,
        notes: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> WorkerRead:
        """Tick (or untick) one onboarding step, promoting the worker when done."""
        with self.store.locked(worker_id):
            worker = self._get(worker_id)
            step = next((s for s in worker.onboarding_steps if s.id == step_id), None)
            if step is None:
                raise NotFoundError(f"Onboarding step {step_id} not found")
            step.completed = completed
            if notes:
                step.notes = notes
            promoted = sync_onboarding_state(worker)
            self.store.touch(worker)
            snapshot = WorkerRead.model_validate(worker)

        if promoted:
            logger.info("Worker %s completed onboarding", worker_id)
        self.audit.log(
            actor=actor,
            action="onboarding",
            object_type="worker",
            object_id=worker_id,
            details={"step": step_id, "completed": completed, "promoted": promoted},
        )
        return snapshot

    def update_profile(self, worker_id: str, data: WorkerUpdate, actor: Optional[str] = None) -> WorkerRead:
        changes = data.model_dump(exclude_none=True)
        with self.store.locked(worker_id):
            worker = self._get(worker_id)
            for key, value in changes.items():
                setattr(worker, key, value)
            self.store.touch(worker)
            snapshot = WorkerRead.model_validate(worker)
        self.audit.log(
            actor=actor,
            action="update",
            object_type="worker",
            object_id=worker_id,
            details={"fields": sorted(changes)},
        )
        return snapshot

    def set_unavailable_dates(
        self,
        worker_id: str,
        unavailable_dates: Iterable[date],
        actor: Optional[str] = None,
    ) -> WorkerRead:
        """Replace the worker's unavailable calendar days (deduplicated, sorted)."""
        days = sorted(set(unavailable_dates))
        with self.store.locked(worker_id):
            worker = self._get(worker_id)
            worker.unavailable_dates = days
            self.store.touch(worker)
            snapshot = WorkerRead.model_validate(worker)
        self.audit.log(
            actor=actor,
            action="availability",
            object_type="worker",
            object_id=worker_id,
            details={"unavailable_dates": [d.isoformat() for d in days]},
        )
        return snapshot
