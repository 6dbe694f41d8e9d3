from flask import Blueprint
from molefit.controllers import exercise_controller

exercise_bp = Blueprint("exercises", __name__, url_prefix="/api")

exercise_bp.route("/exercises", methods=["GET"])(exercise_controller.list_exercises)
exercise_bp.route("/exercises", methods=["POST"])(exercise_controller.create_exercise)
exercise_bp.route("/generate-exercises", methods=["POST"])(exercise_controller.generate_exercises)
