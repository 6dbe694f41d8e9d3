from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.sql import func


class Patient(db.Model):
    __tablename__ = "patients"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True)

    email = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    emergency_contact_name = db.Column(db.String(160), nullable=True)
    emergency_contact_phone = db.Column(db.String(40), nullable=True)
    medical_conditions = db.Column(db.JSON, nullable=True)    # list of strings
    current_medications = db.Column(db.JSON, nullable=True)   # list of strings
    nft_wallet_address = db.Column(db.String(64), nullable=True)
    profile_image_url = db.Column(db.String(500), nullable=True)
    assigned_doctor_id = db.Column(db.String(36), db.ForeignKey("doctors.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = db.relationship("User", backref=db.backref("patient_profile", uselist=False, cascade="all,delete"))
    assigned_doctor = db.relationship("Doctor", backref=db.backref("assigned_patients", lazy="dynamic"))

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "date_of_birth": iso(self.date_of_birth),
            "phone": self.phone,
            "emergency_contact_name": self.emergency_contact_name,
            "emergency_contact_phone": self.emergency_contact_phone,
            "medical_conditions": self.medical_conditions or [],
            "current_medications": self.current_medications or [],
            "nft_wallet_address": self.nft_wallet_address,
            "assigned_doctor_id": self.assigned_doctor_id,
            "created_at": iso(self.created_at),
        }
