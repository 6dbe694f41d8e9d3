from flask import Blueprint
from molefit.controllers import analysis_controller

analysis_bp = Blueprint("analysis", __name__, url_prefix="/api")

analysis_bp.route("/analyze-video", methods=["POST"])(analysis_controller.analyze_video)
