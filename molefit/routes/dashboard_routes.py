from flask import Blueprint
from molefit.controllers import dashboard_controller

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")

dashboard_bp.route("/doctor/patients", methods=["GET"])(dashboard_controller.doctor_patients)
dashboard_bp.route("/doctor/patients/<patient_id>/completions", methods=["GET"])(dashboard_controller.patient_completions)
dashboard_bp.route("/patients/<patient_id>/nfts", methods=["GET"])(dashboard_controller.patient_nfts)
