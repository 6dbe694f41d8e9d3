from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.sql import func


class NFT(db.Model):
    __tablename__ = "nfts"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    patient_id = db.Column(db.String(36), db.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_completion_id = db.Column(db.String(36), db.ForeignKey("exercise_completions.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=False)
    token_id = db.Column(db.String(80), nullable=True)
    contract_address = db.Column(db.String(64), nullable=True)
    wallet_address = db.Column(db.String(64), nullable=False)
    transaction_hash = db.Column(db.String(80), nullable=True, index=True)
    block_number = db.Column(db.BigInteger, nullable=True)

    exercise_type = db.Column(db.String(160), nullable=False)
    completion_score = db.Column(db.Float, nullable=True)
    difficulty_level = db.Column(db.String(40), nullable=True)
    body_part = db.Column(db.String(80), nullable=True)
    rarity = db.Column(db.String(20), nullable=True)

    minted = db.Column(db.Boolean, nullable=False, default=True)
    minted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    signer = db.Column(db.String(20), nullable=True)     # "admin_key" | "user_wallet"
    ai_generated = db.Column(db.Boolean, nullable=False, default=True)
    image_prompt = db.Column(db.Text, nullable=True)
    generation_model = db.Column(db.String(120), nullable=True)
    attributes = db.Column(db.JSON, nullable=True)
    metadata_uri = db.Column(db.Text, nullable=True)
    viewed_by_patient = db.Column(db.Boolean, nullable=False, default=False)
    viewed_by_doctor = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    patient = db.relationship("Patient", backref=db.backref("nfts", cascade="all,delete-orphan"))
    exercise_completion = db.relationship("ExerciseCompletion", backref=db.backref("nfts", cascade="all,delete-orphan"))

    def to_dict(self):
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "exercise_completion_id": self.exercise_completion_id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "token_id": self.token_id,
            "contract_address": self.contract_address,
            "wallet_address": self.wallet_address,
            "transaction_hash": self.transaction_hash,
            "block_number": self.block_number,
            "exercise_type": self.exercise_type,
            "completion_score": self.completion_score,
            "difficulty_level": self.difficulty_level,
            "body_part": self.body_part,
            "rarity": self.rarity,
            "minted": self.minted,
            "minted_at": iso(self.minted_at),
            "signer": self.signer,
            "attributes": self.attributes or [],
            "created_at": iso(self.created_at),
        }
