from .user import User
from .doctor import Doctor
from .patient import Patient
from .exercise import Exercise
from .routine import Routine
from .routine_exercise import RoutineExercise
from .exercise_completion import ExerciseCompletion, COMPLETION_STATUSES
from .nft import NFT
