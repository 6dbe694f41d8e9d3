from flask import Blueprint
from molefit.controllers import health_controller

health_bp = Blueprint("health", __name__, url_prefix="/api")

health_bp.route("/health", methods=["GET"])(health_controller.health)
health_bp.route("/health/db", methods=["GET"])(health_controller.health_db)
health_bp.route("/debug/env", methods=["GET"])(health_controller.debug_env)
health_bp.route("/setup-sample-data", methods=["POST"])(health_controller.setup_sample_data)
