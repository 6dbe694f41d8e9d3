"""
Request bodies accepted by the API.

Keys that are present but empty ("" / null) are treated as absent so that
the missing-field error names them, matching the truthiness checks the
handlers have always applied.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_empty(cls, data):
        if isinstance(data, dict):
            return {
                k: v for k, v in data.items()
                if v is not None and not (isinstance(v, str) and not v.strip())
            }
        return data


# ---------------------------- auth ----------------------------
class SignupRequest(RequestSchema):
    email: str
    password: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    user_type: str = Field(alias="userType")
    additional_data: Dict[str, Any] = Field(default_factory=dict, alias="additionalData")

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v):
        return v.lower().strip()

    @field_validator("user_type")
    @classmethod
    def _known_user_type(cls, v):
        if v not in ("doctor", "patient"):
            raise ValueError("Invalid user type")
        return v

    @field_validator("password")
    @classmethod
    def _password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password too short")
        return v


class SigninRequest(RequestSchema):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v):
        return v.lower().strip()


# ---------------------------- nft ----------------------------
class MintRequest(RequestSchema):
    wallet_address: str = Field(alias="walletAddress")
    exercise_type: str = Field(alias="exerciseType")
    completion_score: float = Field(alias="completionScore", ge=0, le=100)
    difficulty: str = "Intermediate"
    body_part: str = Field("Full Body", alias="bodyPart")
    player_name: str = Field("Champion", alias="playerName")
    patient_id: Optional[str] = Field(None, alias="patientId")
    exercise_completion_id: Optional[str] = Field(None, alias="exerciseCompletionId")


class ImageRequest(RequestSchema):
    exercise_type: str = Field(alias="exerciseType")
    completion_score: float = Field(alias="completionScore", ge=0, le=100)
    difficulty: str
    body_part: str = Field(alias="bodyPart")
    player_name: str = Field("Champion", alias="playerName")


class DirectMintRequest(RequestSchema):
    recipient_address: str = Field(alias="recipientAddress")
    metadata: Dict[str, Any]


class SaveNftRequest(RequestSchema):
    patient_id: str = Field(alias="patientId")
    exercise_completion_id: str = Field(alias="exerciseCompletionId")
    nft_metadata: Dict[str, Any] = Field(alias="nftMetadata")
    image_url: str = Field(alias="imageUrl")
    image_prompt: Optional[str] = Field(None, alias="imagePrompt")
    wallet_address: str = Field(alias="walletAddress")
    transaction_hash: str = Field(alias="transactionHash")
    exercise_type: str = Field(alias="exerciseType")
    completion_score: float = Field(alias="completionScore", ge=0, le=100)
    difficulty: str = "Intermediate"
    body_part: str = Field("Full Body", alias="bodyPart")


# ---------------------------- analysis ----------------------------
class AnalyzeVideoRequest(RequestSchema):
    video_base64: str = Field(alias="videoBase64")
    mime_type: Optional[str] = Field(None, alias="mimeType")
    exercise_context: Dict[str, Any] = Field(default_factory=dict, alias="exerciseContext")


# ---------------------------- exercises / routines ----------------------------
class GenerateExercisesRequest(RequestSchema):
    patient_conditions: List[str] = Field(alias="patientConditions", min_length=1)
    patient_name: Optional[str] = Field(None, alias="patientName")


class ExerciseCreateRequest(RequestSchema):
    name: str
    instructions: str
    description: Optional[str] = None
    category: str = "core"
    difficulty_level: int = Field(1, ge=1, le=5)
    default_sets: int = Field(3, ge=1)
    default_reps: Optional[int] = Field(None, ge=1)
    default_duration_seconds: Optional[int] = Field(None, ge=1)
    rest_seconds: Optional[int] = Field(None, ge=0)
    equipment_needed: Optional[str] = None
    muscle_groups: List[str] = Field(default_factory=list)
    safety_notes: Optional[str] = None


class RoutineExerciseItem(RequestSchema):
    exercise_id: str = Field(alias="exerciseId")
    sets: int = Field(3, ge=1)
    reps: Optional[int] = Field(None, ge=1)
    duration_seconds: Optional[int] = Field(None, alias="durationSeconds", ge=1)
    rest_seconds: Optional[int] = Field(None, alias="restSeconds", ge=0)
    notes: Optional[str] = None
    exercise: Optional[ExerciseCreateRequest] = None


class RoutineCreateRequest(RequestSchema):
    patient_id: str = Field(alias="patientId")
    title: str
    description: Optional[str] = None
    frequency_per_week: int = Field(3, alias="frequencyPerWeek", ge=1, le=14)
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    notes: Optional[str] = None
    exercises: List[RoutineExerciseItem] = Field(min_length=1)
