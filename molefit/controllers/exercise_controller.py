from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from molefit.extensions import db
from molefit.helpers import current_doctor, error_response, get_services, parse_body, role_required
from molefit.models import Exercise
from molefit.schemas import ExerciseCreateRequest, GenerateExercisesRequest
from molefit.services.exercise_generation import CATEGORIES


@jwt_required()
def list_exercises():
    query = Exercise.query
    category = request.args.get("category")
    if category:
        query = query.filter_by(category=category)
    exercises = query.order_by(Exercise.name).all()
    return jsonify({"success": True, "exercises": [e.to_dict() for e in exercises]}), 200


def exercise_from_request(body, doctor_id=None, ai_generated=False):
    return Exercise(
        name=body.name,
        description=body.description,
        category=body.category if body.category in CATEGORIES else "core",
        difficulty_level=body.difficulty_level,
        default_sets=body.default_sets,
        default_reps=body.default_reps,
        default_duration_seconds=body.default_duration_seconds,
        rest_seconds=body.rest_seconds,
        instructions=body.instructions,
        equipment_needed=body.equipment_needed,
        muscle_groups=body.muscle_groups,
        safety_notes=body.safety_notes,
        ai_generated=ai_generated,
        created_by_doctor_id=doctor_id,
    )


@role_required("doctor")
def create_exercise():
    body = parse_body(ExerciseCreateRequest, request.get_json(silent=True))
    doctor = current_doctor()

    exercise = exercise_from_request(body, doctor.id)
    try:
        db.session.add(exercise)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to create exercise")
        return error_response("Failed to create exercise", str(e))

    current_app.logger.info("Doctor %s created exercise %s", doctor.id, exercise.id)
    return jsonify({"success": True, "exercise": exercise.to_dict()}), 201


def generate_exercises():
    body = parse_body(GenerateExercisesRequest, request.get_json(silent=True))

    try:
        exercises = get_services().exercises.generate(body.patient_conditions)
    except Exception as e:
        current_app.logger.exception("Exercise generation failed")
        return error_response("Failed to generate exercises", str(e))

    current_app.logger.info("Generated %d exercises for %s", len(exercises), body.patient_name or "patient")
    return jsonify({"success": True, "exercises": exercises}), 200
