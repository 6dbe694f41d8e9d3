from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

COMPLETION_STATUSES = ("completed", "needs_improvement", "failed")


class ExerciseCompletion(db.Model):
    __tablename__ = "exercise_completions"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    routine_exercise_id = db.Column(db.String(36), db.ForeignKey("routine_exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = db.Column(db.String(36), db.ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)

    video_url = db.Column(db.String(500), nullable=True)
    ai_analysis_result = db.Column(db.JSON, nullable=True)
    form_score = db.Column(db.Float, nullable=True)                 # 0-100
    completion_status = db.Column(db.String(30), nullable=False, default="completed")
    actual_sets = db.Column(db.Integer, nullable=True)
    actual_reps = db.Column(db.Integer, nullable=True)
    actual_duration_seconds = db.Column(db.Integer, nullable=True)
    completion_date = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    doctor_feedback = db.Column(db.Text, nullable=True)
    nft_minted = db.Column(db.Boolean, nullable=False, default=False)
    nft_token_id = db.Column(db.String(80), nullable=True)
    # sha256 of patient/exercise/score/time-bucket; set only on rows the mint flow provisions
    idempotency_key = db.Column(db.String(64), nullable=True, unique=True)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    patient = db.relationship("Patient", backref=db.backref("completions", cascade="all,delete-orphan"))
    routine_exercise = db.relationship("RoutineExercise", backref=db.backref("completions", cascade="all,delete-orphan"))

    @validates("completion_status")
    def validate_completion_status(self, key, value):
        if value not in COMPLETION_STATUSES:
            raise ValueError(f"completion_status must be one of {', '.join(COMPLETION_STATUSES)}, got {value!r}")
        return value

    def to_dict(self):
        return {
            "id": self.id,
            "routine_exercise_id": self.routine_exercise_id,
            "patient_id": self.patient_id,
            "video_url": self.video_url,
            "form_score": self.form_score,
            "completion_status": self.completion_status,
            "actual_sets": self.actual_sets,
            "actual_reps": self.actual_reps,
            "actual_duration_seconds": self.actual_duration_seconds,
            "completion_date": iso(self.completion_date),
            "doctor_feedback": self.doctor_feedback,
            "nft_minted": self.nft_minted,
            "nft_token_id": self.nft_token_id,
            "created_at": iso(self.created_at),
        }
