from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.sql import func


class Doctor(db.Model):
    __tablename__ = "doctors"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True)

    email = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    medical_license = db.Column(db.String(80), nullable=True)
    specialization = db.Column(db.String(120), nullable=True)
    hospital_affiliation = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    profile_image_url = db.Column(db.String(500), nullable=True)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = db.relationship("User", backref=db.backref("doctor_profile", uselist=False, cascade="all,delete"))

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
            "medical_license": self.medical_license,
            "specialization": self.specialization,
            "hospital_affiliation": self.hospital_affiliation,
            "phone": self.phone,
            "is_verified": self.is_verified,
            "created_at": iso(self.created_at),
        }
