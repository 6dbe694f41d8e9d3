from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.sql import func


class Exercise(db.Model):
    __tablename__ = "exercises"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(160), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(60), nullable=True)          # upper_body/lower_body/core/cardio/...
    difficulty_level = db.Column(db.Integer, nullable=True)     # 1-5
    default_sets = db.Column(db.Integer, nullable=True)
    default_reps = db.Column(db.Integer, nullable=True)
    default_duration_seconds = db.Column(db.Integer, nullable=True)
    rest_seconds = db.Column(db.Integer, nullable=True)
    instructions = db.Column(db.Text, nullable=True)
    video_demo_url = db.Column(db.String(500), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    equipment_needed = db.Column(db.String(255), nullable=True)
    muscle_groups = db.Column(db.JSON, nullable=True)
    safety_notes = db.Column(db.Text, nullable=True)
    ai_generated = db.Column(db.Boolean, nullable=False, default=False)
    created_by_doctor_id = db.Column(db.String(36), db.ForeignKey("doctors.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "difficulty_level": self.difficulty_level,
            "default_sets": self.default_sets,
            "default_reps": self.default_reps,
            "default_duration_seconds": self.default_duration_seconds,
            "rest_seconds": self.rest_seconds,
            "instructions": self.instructions,
            "equipment_needed": self.equipment_needed,
            "muscle_groups": self.muscle_groups or [],
            "safety_notes": self.safety_notes,
            "ai_generated": self.ai_generated,
            "created_by_doctor_id": self.created_by_doctor_id,
            "created_at": iso(self.created_at),
        }
