from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.sql import func


class Routine(db.Model):
    __tablename__ = "routines"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    patient_id = db.Column(db.String(36), db.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    prescribed_by_doctor_id = db.Column(db.String(36), db.ForeignKey("doctors.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    frequency_per_week = db.Column(db.Integer, nullable=False, default=3)
    # one active routine per (patient, purpose) is a convention, not a constraint
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    patient = db.relationship("Patient", backref=db.backref("routines", cascade="all,delete-orphan"))
    doctor = db.relationship("Doctor", backref=db.backref("prescribed_routines", lazy="dynamic"))

    def to_dict(self):
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "prescribed_by_doctor_id": self.prescribed_by_doctor_id,
            "title": self.title,
            "description": self.description,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "frequency_per_week": self.frequency_per_week,
            "is_active": self.is_active,
            "notes": self.notes,
            "created_at": iso(self.created_at),
        }
