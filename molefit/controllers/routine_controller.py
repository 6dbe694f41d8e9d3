from datetime import datetime

from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from molefit.controllers.exercise_controller import exercise_from_request
from molefit.errors import NotFoundError, RequestValidationError
from molefit.extensions import db
from molefit.helpers import current_doctor, error_response, parse_body, role_required
from molefit.models import Exercise, Patient, Routine, RoutineExercise
from molefit.schemas import RoutineCreateRequest
from molefit.services.exercise_generation import is_ai_generated_id


def _resolve_exercise(item, doctor):
    """Existing exercise row, or a new one persisted from an AI suggestion."""
    if not is_ai_generated_id(item.exercise_id):
        exercise = db.session.get(Exercise, item.exercise_id)
        if not exercise:
            raise NotFoundError(f"Exercise {item.exercise_id} not found")
        return exercise

    if item.exercise is None:
        raise RequestValidationError(f"Exercise details required for {item.exercise_id}")
    exercise = exercise_from_request(item.exercise, doctor.id, ai_generated=True)
    db.session.add(exercise)
    db.session.flush()
    current_app.logger.info("Saved AI-generated exercise %s as %s", item.exercise_id, exercise.id)
    return exercise


@role_required("doctor")
def create_routine():
    body = parse_body(RoutineCreateRequest, request.get_json(silent=True))
    doctor = current_doctor()

    patient = db.session.get(Patient, body.patient_id)
    if not patient:
        raise NotFoundError(f"Patient {body.patient_id} not found")

    try:
        routine = Routine(
            patient_id=patient.id,
            prescribed_by_doctor_id=doctor.id,
            title=body.title,
            description=body.description,
            frequency_per_week=body.frequency_per_week,
            start_date=body.start_date or datetime.utcnow().date(),
            end_date=body.end_date,
            notes=body.notes,
            is_active=True,
        )
        db.session.add(routine)
        db.session.flush()

        for order, item in enumerate(body.exercises, start=1):
            exercise = _resolve_exercise(item, doctor)
            db.session.add(RoutineExercise(
                routine_id=routine.id,
                exercise_id=exercise.id,
                sets=item.sets,
                reps=item.reps,
                duration_seconds=item.duration_seconds,
                rest_seconds=item.rest_seconds,
                order_in_routine=order,
                notes=item.notes,
            ))

        if not patient.assigned_doctor_id:
            patient.assigned_doctor_id = doctor.id
        db.session.commit()
    except (NotFoundError, RequestValidationError):
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create routine")
        return error_response("Failed to create routine", str(e))

    current_app.logger.info("Routine %s created for patient %s", routine.id, patient.id)
    data = routine.to_dict()
    data["exercises"] = [link.to_dict(include_exercise=True) for link in routine.routine_exercises]
    return jsonify({"success": True, "routine": data}), 201


@jwt_required()
def patient_routines(patient_id):
    if not db.session.get(Patient, patient_id):
        raise NotFoundError(f"Patient {patient_id} not found")

    routines = (
        Routine.query
        .filter_by(patient_id=patient_id, is_active=True)
        .order_by(Routine.created_at.desc())
        .all()
    )
    result = []
    for routine in routines:
        data = routine.to_dict()
        data["doctor_name"] = routine.doctor.full_name if routine.doctor else None
        data["exercise_count"] = len(routine.routine_exercises)
        result.append(data)
    return jsonify({"success": True, "routines": result}), 200


@jwt_required()
def routine_exercises(routine_id):
    routine = db.session.get(Routine, routine_id)
    if not routine:
        raise NotFoundError(f"Routine {routine_id} not found")
    return jsonify({
        "success": True,
        "exercises": [link.to_dict(include_exercise=True) for link in routine.routine_exercises],
    }), 200
