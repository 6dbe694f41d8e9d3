from molefit.extensions import db
from molefit.models.ids import generate_uuid, iso
from sqlalchemy.sql import func


class RoutineExercise(db.Model):
    __tablename__ = "routine_exercises"

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    routine_id = db.Column(db.String(36), db.ForeignKey("routines.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_id = db.Column(db.String(36), db.ForeignKey("exercises.id"), nullable=False, index=True)

    sets = db.Column(db.Integer, nullable=False, default=3)
    reps = db.Column(db.Integer, nullable=True)               # rep-based exercises
    duration_seconds = db.Column(db.Integer, nullable=True)   # time-based exercises
    rest_seconds = db.Column(db.Integer, nullable=True)
    order_in_routine = db.Column(db.Integer, nullable=False, default=1)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    routine = db.relationship("Routine", backref=db.backref("routine_exercises", order_by="RoutineExercise.order_in_routine", cascade="all,delete-orphan"))
    exercise = db.relationship("Exercise")

    def to_dict(self, include_exercise=False):
        data = {
            "id": self.id,
            "routine_id": self.routine_id,
            "exercise_id": self.exercise_id,
            "sets": self.sets,
            "reps": self.reps,
            "duration_seconds": self.duration_seconds,
            "rest_seconds": self.rest_seconds,
            "order_in_routine": self.order_in_routine,
            "notes": self.notes,
            "created_at": iso(self.created_at),
        }
        if include_exercise and self.exercise is not None:
            data["exercise"] = self.exercise.to_dict()
        return data
