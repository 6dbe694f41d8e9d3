"""
Resolve (or lazily create) the patient and exercise-completion rows a minted
NFT must reference.

Resolution short-circuits at the first hit:

1. patient: explicit id, else the first patient row (demo convenience)
2. completion: explicit id, else the patient's newest un-minted completion,
   else a completion already provisioned under this request's idempotency
   key, else a new exercise -> routine -> routine_exercise -> completion chain

Each insert is committed on its own; a failure part-way leaves earlier rows
in place. The idempotency key (patient, exercise, score, time bucket) is unique in
the database, so two racing requests converge on a single completion even
though they may each create their own exercise/routine rows.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from molefit.errors import (
    ConflictError, NoDoctorAvailable, NoPatientAvailable, NotFoundError, ProvisioningError, RequestValidationError,
)
from molefit.extensions import db
from molefit.models import Doctor, Exercise, ExerciseCompletion, Patient, Routine, RoutineExercise
from molefit.services.rewards import format_score, workout_category

logger = logging.getLogger(__name__)

DIFFICULTY_LEVELS = {"Easy": 1, "Intermediate": 2}
DEFAULT_SETS = 3
DEFAULT_REPS = 10


@dataclass
class ProvisionedEntities:
    patient_id: str
    exercise_completion_id: str
    created: List[str] = field(default_factory=list)


def difficulty_level(label):
    return DIFFICULTY_LEVELS.get(label, 3)


def idempotency_key(patient_id, exercise_type, completion_score, now, window_seconds):
    """Same patient, exercise and score inside one time window is the same session."""
    bucket = int(now.timestamp() // window_seconds)
    raw = f"{patient_id}:{exercise_type.strip().lower()}:{format_score(completion_score)}:{bucket}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _insert(row, label, created):
    db.session.add(row)
    db.session.commit()
    created.append(label)
    logger.info("Created %s %s", label, row.id)
    return row


def resolve_patient(patient_id=None):
    if patient_id:
        patient = db.session.get(Patient, patient_id)
        if not patient:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    patient = Patient.query.first()
    if not patient:
        raise NoPatientAvailable(
            "Patient ID required for NFT creation. Provide patientId or ensure patients exist in the database.")
    logger.info("No patientId provided, using demo patient %s", patient.id)
    return patient


def _ensure_not_minted(completion):
    if completion.nft_minted:
        raise ConflictError(f"Exercise completion {completion.id} already has a minted NFT", error="Already minted")
    return completion


def find_or_create_exercise(exercise_type, body_part, difficulty, created):
    exercise = Exercise.query.filter_by(name=exercise_type).first()
    if exercise:
        logger.info("Using existing exercise %s", exercise.id)
        return exercise

    return _insert(Exercise(
        name=exercise_type,
        description=f"{exercise_type} exercise for {body_part}",
        category=workout_category(body_part),
        difficulty_level=difficulty_level(difficulty),
        default_sets=DEFAULT_SETS,
        default_reps=DEFAULT_REPS,
        instructions=f"Perform {exercise_type} targeting {body_part}",
    ), "exercise", created)


def find_or_create_routine(patient, created):
    routine = Routine.query.filter_by(patient_id=patient.id, is_active=True).first()
    if routine:
        logger.info("Using existing routine %s", routine.id)
        return routine

    doctor = Doctor.query.first()
    if not doctor:
        raise NoDoctorAvailable("No doctors found to assign routine")

    return _insert(Routine(
        patient_id=patient.id,
        prescribed_by_doctor_id=doctor.id,
        title="NFT Reward Routine",
        description="Routine for NFT achievement rewards",
        start_date=datetime.utcnow().date(),
        frequency_per_week=3,
        is_active=True,
    ), "routine", created)


def find_or_create_routine_exercise(routine, exercise, created):
    link = RoutineExercise.query.filter_by(routine_id=routine.id, exercise_id=exercise.id).first()
    if link:
        logger.info("Using existing routine_exercise %s", link.id)
        return link

    return _insert(RoutineExercise(
        routine_id=routine.id,
        exercise_id=exercise.id,
        sets=DEFAULT_SETS,
        reps=DEFAULT_REPS,
        order_in_routine=1,
    ), "routine_exercise", created)


def create_completion(patient, routine_exercise, score, key, created):
    completion = ExerciseCompletion(
        routine_exercise_id=routine_exercise.id,
        patient_id=patient.id,
        completion_status="completed",
        form_score=score,
        nft_minted=False,
        actual_sets=DEFAULT_SETS,
        actual_reps=DEFAULT_REPS,
        idempotency_key=key,
    )
    try:
        return _insert(completion, "exercise_completion", created)
    except IntegrityError:
        db.session.rollback()
        winner = ExerciseCompletion.query.filter_by(idempotency_key=key).first()
        if winner is None:
            raise
        logger.info("Concurrent request already provisioned completion %s", winner.id)
        return _ensure_not_minted(winner)


def provision_mint_entities(mint_request, window_seconds=300, now=None):
    """
    `mint_request` is a schemas.MintRequest. Returns ProvisionedEntities whose
    ids reference rows that exist when this returns.
    """
    now = now or datetime.now(timezone.utc)
    created = []

    try:
        if mint_request.exercise_completion_id:
            completion = db.session.get(ExerciseCompletion, mint_request.exercise_completion_id)
            if not completion:
                raise NotFoundError(f"Exercise completion {mint_request.exercise_completion_id} not found")
            _ensure_not_minted(completion)
            if mint_request.patient_id and mint_request.patient_id != completion.patient_id:
                raise RequestValidationError(
                    f"Exercise completion {completion.id} does not belong to patient {mint_request.patient_id}")
            return ProvisionedEntities(resolve_patient(completion.patient_id).id, completion.id, created)

        patient = resolve_patient(mint_request.patient_id)

        completion = (
            ExerciseCompletion.query
            .filter_by(patient_id=patient.id, nft_minted=False)
            .order_by(ExerciseCompletion.created_at.desc())
            .first()
        )
        if completion:
            logger.info("Using most recent completion %s", completion.id)
            return ProvisionedEntities(patient.id, completion.id, created)

        key = idempotency_key(
            patient.id, mint_request.exercise_type, mint_request.completion_score, now, window_seconds)
        completion = ExerciseCompletion.query.filter_by(idempotency_key=key).first()
        if completion:
            logger.info("Reusing completion %s provisioned for the same request window", completion.id)
            _ensure_not_minted(completion)
            return ProvisionedEntities(patient.id, completion.id, created)

        logger.info("Creating exercise completion chain for patient %s", patient.id)
        exercise = find_or_create_exercise(
            mint_request.exercise_type, mint_request.body_part, mint_request.difficulty, created)
        routine = find_or_create_routine(patient, created)
        routine_exercise = find_or_create_routine_exercise(routine, exercise, created)
        completion = create_completion(patient, routine_exercise, mint_request.completion_score, key, created)
        return ProvisionedEntities(patient.id, completion.id, created)

    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Provisioning failed after creating %s: %s", created or "nothing", e)
        raise ProvisioningError(f"Failed to create exercise completion: {e}") from e
