from flask import Blueprint
from molefit.controllers import auth_controller

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

auth_bp.route("/signup", methods=["POST"])(auth_controller.signup)
auth_bp.route("/signin", methods=["POST"])(auth_controller.signin)
