"""
Generate-and-mint workflow plus the shared NFT persistence step.

    provision entities -> build prompt -> generate image -> metadata
        -> mint -> insert NFT row -> flag completion as minted

A failed mint stops before any NFT row is written. Once the chain has accepted
the mint nothing can undo it, so a database failure afterwards is logged with
the transaction hash and surfaced as an error carrying that hash.
"""

import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from molefit.errors import ApiError, ConflictError, NotFoundError
from molefit.extensions import db
from molefit.helpers import require_setting
from molefit.models import NFT, ExerciseCompletion, Patient
from molefit.services.chain_service import PATIENT_ROLE, SERVER_ROLE, select_signer
from molefit.services.image_generation import build_image_prompt
from molefit.services.provisioning import provision_mint_entities
from molefit.services.rewards import build_nft_metadata, explorer_tx_url, get_rarity, metadata_uri

logger = logging.getLogger(__name__)


class PersistAfterMintError(ApiError):
    error = "NFT minted but not recorded"

    def __init__(self, transaction_hash, cause):
        self.transaction_hash = transaction_hash
        super().__init__(
            f"NFT was minted in transaction {transaction_hash} but saving it failed: {cause}",
            details={"transactionHash": transaction_hash},
        )


def generate_image(services, exercise_type, completion_score, difficulty, body_part, player_name):
    """Prompt, image URL and metadata for an achievement, without minting."""
    prompt = build_image_prompt(exercise_type, completion_score, difficulty, body_part, player_name)
    logger.info("Generated image prompt for %s (%s)", exercise_type, get_rarity(completion_score))
    image_url = services.images.generate(prompt, exercise_type)
    metadata = build_nft_metadata(exercise_type, completion_score, difficulty, body_part, image_url, player_name)
    return prompt, image_url, metadata


def persist_minted_nft(patient_id, exercise_completion_id, metadata, image_url, image_prompt, wallet_address,
                       mint_result, exercise_type, completion_score, difficulty, body_part,
                       contract_address, generation_model=None):
    try:
        nft = NFT(
            patient_id=patient_id,
            exercise_completion_id=exercise_completion_id,
            name=metadata["name"],
            description=metadata.get("description"),
            image_url=image_url,
            token_id=mint_result.token_id,
            contract_address=contract_address,
            wallet_address=wallet_address,
            transaction_hash=mint_result.transaction_hash,
            block_number=mint_result.block_number,
            exercise_type=exercise_type,
            completion_score=completion_score,
            difficulty_level=difficulty,
            body_part=body_part,
            rarity=get_rarity(completion_score),
            minted=True,
            minted_at=datetime.now(timezone.utc),
            signer=mint_result.signer,
            ai_generated=True,
            image_prompt=image_prompt,
            generation_model=generation_model,
            attributes=metadata.get("attributes", []),
            metadata_uri=metadata_uri(metadata),
        )
        db.session.add(nft)
        db.session.flush()

        # the row and the minted flag land in one commit
        completion = db.session.get(ExerciseCompletion, exercise_completion_id)
        completion.nft_minted = True
        completion.nft_token_id = mint_result.token_id or nft.id
        db.session.commit()
        logger.info("NFT record %s saved for completion %s", nft.id, exercise_completion_id)
        return nft
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Mint %s succeeded on-chain but was not recorded: %s", mint_result.transaction_hash, e)
        raise PersistAfterMintError(mint_result.transaction_hash, e) from e


def _mint_response(metadata, mint_result, nft, wallet_address, contract_address):
    return {
        "nftMetadata": metadata,
        "transactionHash": mint_result.transaction_hash,
        "tokenId": mint_result.token_id,
        "polygonScanUrl": explorer_tx_url(current_app.config["BLOCK_EXPLORER_TX_URL"], mint_result.transaction_hash),
        "contractAddress": contract_address,
        "mintedTo": wallet_address,
        "nftId": nft.id,
        "patientId": nft.patient_id,
        "exerciseCompletionId": nft.exercise_completion_id,
        "rarity": nft.rarity,
        "signer": mint_result.signer,
    }


def generate_and_mint(services, mint_request):
    """Server-signed reward mint; `mint_request` is a schemas.MintRequest."""
    contract_address = require_setting("NFT_CONTRACT_ADDRESS")
    signer = select_signer(SERVER_ROLE, admin_private_key=current_app.config.get("ADMIN_PRIVATE_KEY"))

    entities = provision_mint_entities(
        mint_request, window_seconds=current_app.config["PROVISIONING_IDEMPOTENCY_WINDOW_SECONDS"])
    if entities.created:
        logger.info("Provisioned %s for patient %s", ", ".join(entities.created), entities.patient_id)

    prompt, image_url, metadata = generate_image(
        services, mint_request.exercise_type, mint_request.completion_score,
        mint_request.difficulty, mint_request.body_part, mint_request.player_name)

    mint_result = services.chain.mint(mint_request.wallet_address, metadata, signer)

    nft = persist_minted_nft(
        entities.patient_id, entities.exercise_completion_id, metadata, image_url, prompt,
        mint_request.wallet_address, mint_result, mint_request.exercise_type, mint_request.completion_score,
        mint_request.difficulty, mint_request.body_part, contract_address,
        generation_model=services.images.model_id)

    return _mint_response(metadata, mint_result, nft, mint_request.wallet_address, contract_address)


def record_wallet_mint(services, save_request):
    """Record a mint the patient's connected wallet signed; `save_request` is a schemas.SaveNftRequest."""
    contract_address = require_setting("NFT_CONTRACT_ADDRESS")

    if not db.session.get(Patient, save_request.patient_id):
        raise NotFoundError(f"Patient {save_request.patient_id} not found")
    completion = db.session.get(ExerciseCompletion, save_request.exercise_completion_id)
    if not completion:
        raise NotFoundError(f"Exercise completion {save_request.exercise_completion_id} not found")

    existing = NFT.query.filter_by(transaction_hash=save_request.transaction_hash).first()
    if existing:
        logger.info("Transaction %s already recorded as NFT %s", save_request.transaction_hash, existing.id)
        return existing.to_dict()
    if completion.nft_minted:
        raise ConflictError(f"Exercise completion {completion.id} already has a minted NFT", error="Already minted")

    signer = select_signer(PATIENT_ROLE, save_request.transaction_hash)
    mint_result = services.chain.mint(save_request.wallet_address, save_request.nft_metadata, signer)

    nft = persist_minted_nft(
        save_request.patient_id, save_request.exercise_completion_id, save_request.nft_metadata,
        save_request.image_url, save_request.image_prompt, save_request.wallet_address, mint_result,
        save_request.exercise_type, save_request.completion_score, save_request.difficulty,
        save_request.body_part, contract_address, generation_model=services.images.model_id)
    return nft.to_dict()
