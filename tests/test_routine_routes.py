from molefit.extensions import db
from molefit.models import Exercise, Patient, Routine, RoutineExercise


def _existing_exercise():
    exercise = Exercise(name="Bridges", category="core", difficulty_level=1, default_sets=3,
                        default_reps=12, instructions="Lift hips")
    db.session.add(exercise)
    db.session.commit()
    return exercise


def test_routine_persists_ai_exercises_and_assigns_patient(client, make_doctor, make_patient, auth_headers):
    doctor = make_doctor()
    patient = make_patient()
    bridges = _existing_exercise()
    body = {
        "patientId": patient.id,
        "title": "Post-op knee",
        "frequencyPerWeek": 4,
        "exercises": [
            {"exerciseId": bridges.id, "sets": 2, "reps": 12},
            {
                "exerciseId": "ai-generated-1700000000000-0",
                "sets": 3,
                "durationSeconds": 30,
                "exercise": {"name": "Quad Set", "instructions": "Tighten the thigh", "category": "lower_body"},
            },
        ],
    }

    res = client.post("/api/routines", json=body, headers=auth_headers(doctor.user))

    assert res.status_code == 201, res.get_json()
    routine = res.get_json()["routine"]
    assert routine["frequency_per_week"] == 4
    assert [e["order_in_routine"] for e in routine["exercises"]] == [1, 2]
    assert routine["exercises"][1]["exercise"]["name"] == "Quad Set"
    quad = Exercise.query.filter_by(name="Quad Set").one()
    assert quad.ai_generated is True
    assert quad.created_by_doctor_id == doctor.id
    assert db.session.get(Patient, patient.id).assigned_doctor_id == doctor.id


def test_unknown_exercise_rolls_back(client, make_doctor, make_patient, auth_headers):
    doctor = make_doctor()
    patient = make_patient()
    body = {"patientId": patient.id, "title": "Bad", "exercises": [{"exerciseId": "missing"}]}

    res = client.post("/api/routines", json=body, headers=auth_headers(doctor.user))

    assert res.status_code == 404
    assert Routine.query.count() == 0


def test_ai_exercise_without_details_is_400(client, make_doctor, make_patient, auth_headers):
    doctor = make_doctor()
    patient = make_patient()
    body = {"patientId": patient.id, "title": "Bad", "exercises": [{"exerciseId": "ai-generated-1-0"}]}

    res = client.post("/api/routines", json=body, headers=auth_headers(doctor.user))

    assert res.status_code == 400
    assert RoutineExercise.query.count() == 0


def test_patient_routines_and_exercises(client, make_doctor, make_patient, make_completion, auth_headers):
    doctor = make_doctor()
    patient = make_patient()
    completion = make_completion(patient, doctor)
    headers = auth_headers(patient.user)

    res = client.get(f"/api/patients/{patient.id}/routines", headers=headers)
    assert res.status_code == 200
    routines = res.get_json()["routines"]
    assert len(routines) == 1
    assert routines[0]["doctor_name"] == "Sarah Smith"

    res = client.get(f"/api/routines/{routines[0]['id']}/exercises", headers=headers)
    exercises = res.get_json()["exercises"]
    assert exercises[0]["id"] == completion.routine_exercise_id
    assert exercises[0]["exercise"]["name"] == "Squats"


def test_missing_routine_is_404(client, make_patient, auth_headers):
    patient = make_patient()
    res = client.get("/api/routines/nope/exercises", headers=auth_headers(patient.user))
    assert res.status_code == 404
