from flask import current_app, jsonify, request, send_from_directory

from molefit.errors import ApiError
from molefit.extensions import db
from molefit.helpers import error_response, get_services, parse_body, require_setting
from molefit.schemas import DirectMintRequest, ImageRequest, MintRequest, SaveNftRequest
from molefit.services import nft_service
from molefit.services.chain_service import SERVER_ROLE, select_signer
from molefit.services.rewards import explorer_tx_url


def generate_and_mint():
    # validated before any collaborator is touched
    body = parse_body(MintRequest, request.get_json(silent=True))
    services = get_services()

    try:
        data = nft_service.generate_and_mint(services, body)
    except ApiError:
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("NFT generation and minting failed")
        return error_response("Failed to generate and mint NFT", str(e))

    return jsonify({"success": True, "data": data}), 200


def generate_image():
    body = parse_body(ImageRequest, request.get_json(silent=True))

    try:
        prompt, image_url, metadata = nft_service.generate_image(
            get_services(), body.exercise_type, body.completion_score,
            body.difficulty, body.body_part, body.player_name)
    except Exception as e:
        current_app.logger.exception("NFT image generation failed")
        return error_response("Failed to generate NFT image", str(e))

    return jsonify({
        "success": True,
        "data": {"imageUrl": image_url, "nftMetadata": metadata, "imagePrompt": prompt},
    }), 200


def mint():
    body = parse_body(DirectMintRequest, request.get_json(silent=True))
    signer = select_signer(SERVER_ROLE, admin_private_key=current_app.config.get("ADMIN_PRIVATE_KEY"))
    chain = get_services().chain

    try:
        result = chain.mint(body.recipient_address, body.metadata, signer)
    except ApiError:
        raise
    except Exception as e:
        current_app.logger.exception("Direct mint failed")
        return error_response("Failed to mint NFT", str(e))

    data = result.to_dict()
    data["polygonScanUrl"] = explorer_tx_url(current_app.config["BLOCK_EXPLORER_TX_URL"], result.transaction_hash)
    data["contractAddress"] = chain.contract_address
    data["mintedTo"] = body.recipient_address
    return jsonify({"success": True, "data": data}), 200


def save_to_database():
    body = parse_body(SaveNftRequest, request.get_json(silent=True))

    try:
        nft = nft_service.record_wallet_mint(get_services(), body)
    except ApiError:
        raise
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Saving wallet-signed NFT failed")
        return error_response("Failed to save NFT", str(e))

    return jsonify({"success": True, "message": "NFT saved successfully", "data": nft}), 201


def test_connection():
    chain = get_services().chain
    require_setting("NFT_CONTRACT_ADDRESS")

    try:
        status = chain.check_connection(current_app.config.get("ADMIN_PRIVATE_KEY"))
    except ApiError:
        raise
    except Exception as e:
        current_app.logger.exception("Chain connection check failed")
        return error_response("Blockchain connection failed", str(e))

    status["testWalletAddress"] = current_app.config.get("TEST_WALLET_ADDRESS")
    return jsonify({"success": True, "message": "Connected to blockchain", "data": status}), 200


def generated_image(filename):
    return send_from_directory(current_app.config["GENERATED_NFT_DIR"], filename)
