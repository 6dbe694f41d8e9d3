from flask import Blueprint
from molefit.controllers import routine_controller

routine_bp = Blueprint("routines", __name__, url_prefix="/api")

routine_bp.route("/routines", methods=["POST"])(routine_controller.create_routine)
routine_bp.route("/patients/<patient_id>/routines", methods=["GET"])(routine_controller.patient_routines)
routine_bp.route("/routines/<routine_id>/exercises", methods=["GET"])(routine_controller.routine_exercises)
