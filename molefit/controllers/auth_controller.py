from datetime import date

from flask import current_app, jsonify, request
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from molefit.errors import RequestValidationError
from molefit.extensions import db
from molefit.helpers import parse_body
from molefit.models import Doctor, Patient, User
from molefit.schemas import SigninRequest, SignupRequest


def _parse_date(value):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise RequestValidationError(f"Invalid date: {value}")


def _build_profile(user, body):
    extra = body.additional_data
    if body.user_type == "doctor":
        return Doctor(
            user=user,
            email=user.email,
            first_name=body.first_name,
            last_name=body.last_name,
            medical_license=extra.get("medicalLicense"),
            specialization=extra.get("specialization"),
            hospital_affiliation=extra.get("hospitalAffiliation"),
            phone=extra.get("phone"),
        )
    return Patient(
        user=user,
        email=user.email,
        first_name=body.first_name,
        last_name=body.last_name,
        date_of_birth=_parse_date(extra.get("dateOfBirth")),
        phone=extra.get("phone"),
        emergency_contact_name=extra.get("emergencyContactName"),
        emergency_contact_phone=extra.get("emergencyContactPhone"),
        medical_conditions=extra.get("medicalConditions") or [],
        current_medications=extra.get("currentMedications") or [],
        nft_wallet_address=extra.get("nftWalletAddress"),
    )


def signup():
    body = parse_body(SignupRequest, request.get_json(silent=True))

    if User.query.filter_by(email=body.email).first():
        return jsonify({"success": False, "message": "Email already exists"}), 409

    user = User(email=body.email, role=body.user_type)
    user.set_password(body.password)
    profile = _build_profile(user, body)
    try:
        db.session.add(user)
        db.session.add(profile)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"success": False, "message": "Email already exists"}), 409

    current_app.logger.info("Registered %s %s", body.user_type, user.id)
    return jsonify({
        "success": True,
        "message": "User created successfully",
        "user": {"id": user.id, "email": user.email, "userType": user.role},
    }), 201


def signin():
    data = request.get_json(silent=True) or {}
    if not data.get("email") or not data.get("password"):
        return jsonify({"success": False, "message": "Email and password required"}), 400
    body = parse_body(SigninRequest, data)

    user = User.query.filter_by(email=body.email).first()
    if not user or not user.check_password(body.password):
        return jsonify({"success": False, "message": "Invalid credentials"}), 401

    profile = user.doctor_profile if user.role == "doctor" else user.patient_profile
    if profile is None:
        return jsonify({"success": False, "message": "User profile not found"}), 404

    access_token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})

    return jsonify({
        "success": True,
        "message": "Login successful",
        "user": {
            "id": user.id,
            "email": user.email,
            "userType": user.role,
            "profile": profile.to_dict(),
        },
        "access_token": access_token,
    }), 200
