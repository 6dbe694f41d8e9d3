"""
AI-suggested rehabilitation exercises for a patient's conditions.

Suggestions are not persisted here; each one carries a synthetic
`ai-generated-<millis>-<n>` id until a doctor adds it to a routine.
"""

import json
import logging
import re
import time
from datetime import datetime

logger = logging.getLogger(__name__)

AI_ID_PREFIX = "ai-generated-"
CATEGORIES = ("upper_body", "lower_body", "core", "cardio")

FALLBACK_EXERCISES = [
    {
        "name": "Gentle Range of Motion",
        "description": "Basic movement to maintain joint flexibility",
        "category": "upper_body",
        "difficulty_level": 1,
        "default_sets": 2,
        "default_reps": 10,
        "default_duration_seconds": None,
        "instructions": "Move the affected joint slowly through its comfortable range of motion. Hold briefly at each end.",
    },
    {
        "name": "Breathing Exercise",
        "description": "Deep breathing to promote relaxation and core engagement",
        "category": "core",
        "difficulty_level": 1,
        "default_sets": 3,
        "default_reps": None,
        "default_duration_seconds": 60,
        "instructions": "Breathe in slowly through your nose for 4 counts, hold for 2 counts, exhale through mouth for 6 counts.",
    },
    {
        "name": "Gentle Stretching",
        "description": "Light stretching for affected muscle groups",
        "category": "lower_body",
        "difficulty_level": 2,
        "default_sets": 2,
        "default_reps": None,
        "default_duration_seconds": 30,
        "instructions": "Hold each stretch gently without bouncing. You should feel a mild stretch, not pain.",
    },
    {
        "name": "Isometric Hold",
        "description": "Muscle activation without joint movement",
        "category": "core",
        "difficulty_level": 2,
        "default_sets": 3,
        "default_reps": None,
        "default_duration_seconds": 10,
        "instructions": "Contract the target muscles and hold the position without moving. Breathe normally during the hold.",
    },
    {
        "name": "Light Walking",
        "description": "Low-impact cardiovascular exercise",
        "category": "cardio",
        "difficulty_level": 1,
        "default_sets": 1,
        "default_reps": None,
        "default_duration_seconds": 300,
        "instructions": "Walk at a comfortable pace. Stop if you experience any pain or discomfort.",
    },
]

JSON_ARRAY = re.compile(r"\[\s*{[\s\S]*}\s*\]")


def is_ai_generated_id(exercise_id):
    return str(exercise_id).startswith(AI_ID_PREFIX)


def build_exercise_prompt(conditions):
    return f"""This is a physiotherapy rehabilitation application that helps patients recover from injuries and medical conditions through targeted exercises.

As a professional physical therapist, generate 5 specific rehabilitation exercises for a patient with the following medical conditions: {', '.join(conditions)}.

Focus on exercises that are safe for these conditions, progressive and therapeutic, and can be done at home with minimal equipment.

Format your response as a JSON array with this exact structure:
[
  {{
    "name": "Exercise Name",
    "description": "Brief description of the exercise",
    "category": "upper_body|lower_body|core|cardio",
    "difficulty_level": 1-5,
    "default_sets": 1-5,
    "default_reps": number or null,
    "default_duration_seconds": number or null,
    "instructions": "Step-by-step instructions"
  }}
]

Ensure the JSON is valid and properly formatted."""


def extract_exercises(text):
    """First JSON array in the model's reply, or None if there is none or it won't parse."""
    match = JSON_ARRAY.search(text or "")
    if not match:
        return None
    try:
        exercises = json.loads(match.group(0))
    except ValueError:
        return None
    if not isinstance(exercises, list) or not exercises:
        return None
    return [e for e in exercises if isinstance(e, dict)] or None


def _clamp(value, low, high, default):
    try:
        return max(low, min(high, int(value)))
    except (TypeError, ValueError):
        return default


def normalize_exercises(exercises, now=None):
    now = now or datetime.utcnow()
    stamp = int(time.time() * 1000)
    timestamp = now.isoformat()
    normalized = []
    for index, exercise in enumerate(exercises):
        category = exercise.get("category")
        normalized.append({
            "id": f"{AI_ID_PREFIX}{stamp}-{index}",
            "name": exercise.get("name") or f"Exercise {index + 1}",
            "description": exercise.get("description") or "AI-generated rehabilitation exercise",
            "category": category if category in CATEGORIES else "core",
            "difficulty_level": _clamp(exercise.get("difficulty_level"), 1, 5, 1),
            "default_sets": _clamp(exercise.get("default_sets"), 1, 5, 3),
            "default_reps": exercise.get("default_reps"),
            "default_duration_seconds": exercise.get("default_duration_seconds"),
            "instructions": exercise.get("instructions") or "Follow your physical therapist's guidance for proper form.",
            "ai_generated": True,
            "created_at": timestamp,
            "updated_at": timestamp,
        })
    return normalized


class ExerciseGenerator:
    def __init__(self, bedrock):
        self.bedrock = bedrock

    def generate(self, conditions):
        text = self.bedrock.generate_text(build_exercise_prompt(conditions), temperature=0.4)
        if not text:
            raise ValueError("No response received from Bedrock")

        exercises = extract_exercises(text)
        if exercises is None:
            logger.warning("Could not parse exercises from model reply, using fallback set. Raw: %s", text[:500])
            exercises = FALLBACK_EXERCISES
        return normalize_exercises(exercises)
