from flask import Blueprint
from molefit.controllers import nft_controller

nft_bp = Blueprint("nft", __name__, url_prefix="/api/nft")

nft_bp.route("/generate-and-mint", methods=["POST"])(nft_controller.generate_and_mint)
nft_bp.route("/generate-image", methods=["POST"])(nft_controller.generate_image)
nft_bp.route("/mint", methods=["POST"])(nft_controller.mint)
nft_bp.route("/save-to-database", methods=["POST"])(nft_controller.save_to_database)
nft_bp.route("/test-connection", methods=["GET"])(nft_controller.test_connection)

# generated artwork kept outside the static folder
media_bp = Blueprint("media", __name__)

media_bp.route("/generated-nfts/<path:filename>", methods=["GET"])(nft_controller.generated_image)
