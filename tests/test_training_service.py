import pytest

from cleanslate_api.app.core.errors import DuplicateAssignmentError, NotFoundError
from cleanslate_api.app.schemas.training import TrainingModuleCreate, TrainingModuleType
from cleanslate_api.app.schemas.worker import TrainingProgress, WorkerStatus
from cleanslate_api.app.services.training_service import TrainingService
from cleanslate_api.app.services.worker_service import WorkerService

from conftest import make_worker


@pytest.fixture
def service(store):
    return TrainingService(store)


@pytest.fixture
def trainee(store):
    worker = make_worker(store, full_name="Bongani Trainee", status=WorkerStatus.TRAINING_PENDING)
    for step in worker.onboarding_steps[:3]:
        step.completed = True
    return worker


def test_catalog_is_seeded(service):
    assert [m.id for m in service.list_modules()] == ["train001", "train002", "train003", "train004"]
    assert service.get_module("train003").quiz_id == "quiz001"


def test_unknown_module_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_module("train999")


def test_create_module_gets_a_fresh_id(service):
    module = service.create_module(
        TrainingModuleCreate(title="Pet-friendly Cleaning", type=TrainingModuleType.VIDEO,
                             estimated_duration_minutes=20)
    )

    assert module.id not in {"train001", "train002", "train003", "train004"}
    assert service.get_module(module.id).title == "Pet-friendly Cleaning"


def test_assign_module_starts_not_started(service, trainee):
    worker = service.assign_module(trainee.id, "train004")

    assigned = worker.assigned_training_modules[-1]
    assert (assigned.module_id, assigned.title) == ("train004", "Health & Safety Protocols")
    assert assigned.status == TrainingProgress.NOT_STARTED
    assert assigned.completion_date is None


def test_assigning_twice_is_rejected(service, trainee):
    service.assign_module(trainee.id, "train001")

    with pytest.raises(DuplicateAssignmentError):
        service.assign_module(trainee.id, "train001")


@pytest.mark.parametrize("worker_id, module_id", [("missing", "train001"), (None, "train999")])
def test_assign_with_unknown_reference_raises_not_found(service, trainee, worker_id, module_id):
    with pytest.raises(NotFoundError):
        service.assign_module(worker_id or trainee.id, module_id)


def test_completion_stamps_date_and_score(service, trainee):
    service.assign_module(trainee.id, "train004")
    service.update_progress(trainee.id, "train004", TrainingProgress.IN_PROGRESS)
    worker = service.update_progress(trainee.id, "train004", TrainingProgress.COMPLETED, score=92)

    assigned = worker.assigned_training_modules[0]
    assert assigned.status == TrainingProgress.COMPLETED
    assert assigned.score == 92
    assert assigned.completion_date is not None


def test_completing_non_initial_module_leaves_onboarding_alone(service, trainee):
    service.assign_module(trainee.id, "train004")
    worker = service.update_progress(trainee.id, "train004", TrainingProgress.COMPLETED)

    assert worker.onboarding_steps[-1].completed is False
    assert worker.status == WorkerStatus.TRAINING_PENDING


def test_completing_initial_training_finishes_onboarding(service, trainee):
    service.assign_module(trainee.id, "train002")
    worker = service.update_progress(trainee.id, "train002", TrainingProgress.COMPLETED, score=80)

    assert worker.onboarding_steps[-1].completed is True
    assert worker.status == WorkerStatus.ONBOARDING_COMPLETE
    assert worker.training_verified is True


def test_initial_training_ticks_step_without_promoting_incomplete_worker(store, service):
    applicant = make_worker(store, full_name="New Applicant", status=WorkerStatus.PENDING_APPROVAL)
    service.assign_module(applicant.id, "train003")
    worker = service.update_progress(applicant.id, "train003", TrainingProgress.COMPLETED)

    assert worker.onboarding_steps[-1].completed is True
    assert worker.status == WorkerStatus.PENDING_APPROVAL
    assert worker.training_verified is False


def test_progress_on_unassigned_module_raises_not_found(service, trainee):
    with pytest.raises(NotFoundError):
        service.update_progress(trainee.id, "train001", TrainingProgress.COMPLETED)


def test_training_progress_bumps_worker_version(store, service, trainee):
    before = WorkerService(store).get_worker(trainee.id).version
    service.assign_module(trainee.id, "train001")
    worker = service.update_progress(trainee.id, "train001", TrainingProgress.IN_PROGRESS)

    assert worker.version == before + 2
