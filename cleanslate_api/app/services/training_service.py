"""
Business logic for the training catalog and per-worker progress.

Modules are created by administrators and assigned to workers by
reference.  Completing one of the configured "initial training"
modules ticks the worker's ``initialTraining`` onboarding step, which
may in turn complete onboarding (see ``worker_service``).
"""

import logging
from typing import List, Optional

from ..core.config import settings
from ..core.errors import DuplicateAssignmentError, NotFoundError
from ..core.store import AssignedTrainingModule, MarketplaceStore, TrainingModule, new_id, utcnow
from ..schemas.training import TrainingModuleCreate, TrainingModuleRead
from ..schemas.worker import TrainingProgress, WorkerRead
from .audit_service import AuditService
from .worker_service import sync_onboarding_state


logger = logging.getLogger(__name__)

INITIAL_TRAINING_STEP = "initialTraining"


class TrainingService:
    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store
        self.audit = AuditService(store)

    def list_modules(self) -> List[TrainingModuleRead]:
        modules = sorted(self.store.training_modules.values(), key=lambda m: m.id)
        return [TrainingModuleRead.model_validate(m) for m in modules]

    def _get_module(self, module_id: str) -> TrainingModule:
        module = self.store.training_modules.get(module_id)
        if module is None:
            raise NotFoundError(f"Training module {module_id} not found")
        return module

    def get_module(self, module_id: str) -> TrainingModuleRead:
        return TrainingModuleRead.model_validate(self._get_module(module_id))

    def create_module(self, data: TrainingModuleCreate, actor: Optional[str] = None) -> TrainingModuleRead:
        module = TrainingModule(id=new_id(), **data.model_dump())
        self.store.training_modules[module.id] = module
        logger.info("Training module %s '%s' created", module.id, module.title)
        self.audit.log(actor=actor, action="create", object_type="training_module", object_id=module.id)
        return TrainingModuleRead.model_validate(module)

    def assign_module(self, worker_id: str, module_id: str, actor: Optional[str] = None) -> WorkerRead:
        """Assign a catalog module to a worker in status ``Not Started``."""
        module = self._get_module(module_id)
        with self.store.locked(worker_id):
            worker = self.store.workers.get(worker_id)
            if worker is None:
                raise NotFoundError(f"Worker {worker_id} not found")
            if any(a.module_id == module_id for a in worker.assigned_training_modules):
                raise DuplicateAssignmentError(f"Module {module_id} is already assigned to worker {worker_id}")
            worker.assigned_training_modules.append(AssignedTrainingModule(module_id=module_id, title=module.title))
            self.store.touch(worker)
            snapshot = WorkerRead.model_validate(worker)
        self.audit.log(
            actor=actor,
            action="assign",
            object_type="worker",
            object_id=worker_id,
            details={"module_id": module_id},
        )
        return snapshot

    def update_progress(
        self,
        worker_id: str,
        module_id: str,
        status: TrainingProgress,
        score: Optional[int] = None,
        actor: Optional[str] = None,
    ) -> WorkerRead:
        """Record progress on an assigned module.

        Completion stamps the completion date and keeps ``score`` when
        given.  Completing an initial-training module ticks the
        ``initialTraining`` onboarding step.
        """
        promoted = False
        with self.store.locked(worker_id):
            worker = self.store.workers.get(worker_id)
            if worker is None:
                raise NotFoundError(f"Worker {worker_id} not found")
            assigned = next((a for a in worker.assigned_training_modules if a.module_id == module_id), None)
            if assigned is None:
                raise NotFoundError(f"Module {module_id} is not assigned to worker {worker_id}")
            assigned.status = status
            if status == TrainingProgress.COMPLETED:
                assigned.completion_date = utcnow()
                if score is not None:
                    assigned.score = score

            initial_done = any(
                a.module_id in settings.initial_training_ids and a.status == TrainingProgress.COMPLETED
                for a in worker.assigned_training_modules
            )
            if initial_done:
                for step in worker.onboarding_steps:
                    if step.id == INITIAL_TRAINING_STEP:
                        step.completed = True
                promoted = sync_onboarding_state(worker)
            self.store.touch(worker)
            snapshot = WorkerRead.model_validate(worker)

        if promoted:
            logger.info("Worker %s completed onboarding through training", worker_id)
        self.audit.log(
            actor=actor,
            action="training",
            object_type="worker",
            object_id=worker_id,
            details={"module_id": module_id, "status": status.value, "score": score},
        )
        return snapshot
