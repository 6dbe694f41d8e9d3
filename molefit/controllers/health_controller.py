import os

from flask import current_app, jsonify
from sqlalchemy import text

from molefit.extensions import db
from molefit.helpers import api_response
from molefit.models import Doctor, Patient, User

ENV_SETTINGS = (
    "JWT_SECRET_KEY", "AWS_REGION", "BEDROCK_TEXT_MODEL_ID",
    "BEDROCK_VIDEO_MODEL_ID", "BEDROCK_IMAGE_MODEL_ID", "THIRDWEB_CLIENT_ID",
    "THIRDWEB_SECRET_KEY", "CHAIN_RPC_URL", "NFT_CONTRACT_ADDRESS",
    "ADMIN_PRIVATE_KEY", "TEST_WALLET_ADDRESS", "PUBLIC_BASE_URL",
)

SAMPLE_PASSWORD = "password123"


def health():
    return api_response(True, "MoleFit API is running", {"status": "ok"})


def health_db():
    try:
        db.session.execute(text('SELECT 1'))
        return api_response(
            success=True,
            message="Database connection successful",
            data={"status": "connected"}
        )
    except Exception as e:
        current_app.logger.error("Database check failed: %s", e)
        return api_response(
            success=False,
            message="Database connection failed",
            data={"error": str(e)},
            status_code=500
        )


def debug_env():
    """Which settings are present; values are never returned."""
    present = {"DATABASE_URL": bool(os.getenv("DATABASE_URL"))}
    for name in ENV_SETTINGS:
        present[name] = bool(current_app.config.get(name))
    return api_response(True, "Environment settings", present)


def setup_sample_data():
    if Doctor.query.first() or Patient.query.first():
        return api_response(True, "Sample data already present", {
            "doctors": Doctor.query.count(),
            "patients": Patient.query.count(),
        })

    try:
        doctor_user = User(email="dr.smith@molefit.dev", role="doctor")
        doctor_user.set_password(SAMPLE_PASSWORD)
        doctor = Doctor(
            user=doctor_user,
            email=doctor_user.email,
            first_name="Sarah",
            last_name="Smith",
            specialization="Physical Therapy",
            medical_license="PT-0001",
            is_verified=True,
        )

        patient_user = User(email="alex.patient@molefit.dev", role="patient")
        patient_user.set_password(SAMPLE_PASSWORD)
        patient = Patient(
            user=patient_user,
            email=patient_user.email,
            first_name="Alex",
            last_name="Johnson",
            medical_conditions=["Lower back pain"],
            current_medications=[],
            assigned_doctor=doctor,
        )

        db.session.add_all([doctor_user, doctor, patient_user, patient])
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Failed to insert sample data")
        return jsonify({"success": False, "error": "Failed to set up sample data", "message": str(e)}), 500

    current_app.logger.info("Inserted sample doctor %s and patient %s", doctor.id, patient.id)
    return api_response(True, "Sample data created", {"doctorId": doctor.id, "patientId": patient.id}, 201)
