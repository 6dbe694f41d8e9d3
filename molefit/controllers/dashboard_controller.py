from flask import jsonify
from flask_jwt_extended import jwt_required

from molefit.errors import NotFoundError
from molefit.extensions import db
from molefit.helpers import current_doctor, role_required
from molefit.models import NFT, ExerciseCompletion, Patient, RoutineExercise, Routine


def _patient_stats(patient):
    total = (
        RoutineExercise.query
        .join(Routine, RoutineExercise.routine_id == Routine.id)
        .filter(Routine.patient_id == patient.id, Routine.is_active.is_(True))
        .count()
    )
    completed = ExerciseCompletion.query.filter_by(patient_id=patient.id, completion_status="completed").count()
    last = (
        ExerciseCompletion.query
        .filter_by(patient_id=patient.id)
        .order_by(ExerciseCompletion.completion_date.desc())
        .first()
    )
    return {
        "totalExercises": total,
        "completedExercises": completed,
        "nftCount": NFT.query.filter_by(patient_id=patient.id).count(),
        "lastActivity": last.completion_date.isoformat() if last else None,
    }


@role_required("doctor")
def doctor_patients():
    doctor = current_doctor()
    patients = doctor.assigned_patients.order_by(Patient.last_name, Patient.first_name).all()

    result = []
    for patient in patients:
        data = patient.to_dict()
        data.update(_patient_stats(patient))
        result.append(data)
    return jsonify({"success": True, "patients": result}), 200


@role_required("doctor")
def patient_completions(patient_id):
    if not db.session.get(Patient, patient_id):
        raise NotFoundError(f"Patient {patient_id} not found")

    completions = (
        ExerciseCompletion.query
        .filter_by(patient_id=patient_id)
        .order_by(ExerciseCompletion.completion_date.desc(), ExerciseCompletion.created_at.desc())
        .all()
    )
    result = []
    for completion in completions:
        data = completion.to_dict()
        exercise = completion.routine_exercise.exercise if completion.routine_exercise else None
        data["exercise_name"] = exercise.name if exercise else None
        result.append(data)
    return jsonify({"success": True, "completions": result}), 200


@jwt_required()
def patient_nfts(patient_id):
    if not db.session.get(Patient, patient_id):
        raise NotFoundError(f"Patient {patient_id} not found")

    nfts = NFT.query.filter_by(patient_id=patient_id).order_by(NFT.created_at.desc()).all()
    return jsonify({"success": True, "nfts": [n.to_dict() for n in nfts]}), 200
