import base64
from datetime import date, datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from molefit import create_app
from molefit.extensions import db
from molefit.models import (
    Doctor, Exercise, ExerciseCompletion, Patient, Routine, RoutineExercise, User,
)
from molefit.services import Services
from molefit.services.chain_service import MintResult
from molefit.services.exercise_generation import ExerciseGenerator
from molefit.services.image_generation import ImageGenerator
from molefit.services.video_analysis import VideoAnalyzer

CONTRACT_ADDRESS = "0x" + "cd" * 20
ADMIN_KEY = "0x" + "11" * 32
TX_HASH = "0x" + "ab" * 32
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeBedrock:
    """Stands in for BedrockClient; records every call by name."""

    image_model_id = "amazon.nova-canvas-v1:0"

    def __init__(self):
        self.calls = []
        self.image_result = base64.b64encode(PNG_BYTES).decode("ascii")
        self.text_result = "[]"
        self.video_results = ["✅ PASS - 10 reps with good form"]

    def generate_image(self, prompt, width=512, height=512):
        self.calls.append("generate_image")
        if isinstance(self.image_result, Exception):
            raise self.image_result
        return self.image_result

    def generate_text(self, prompt, temperature=0.3, max_tokens=None):
        self.calls.append("generate_text")
        if isinstance(self.text_result, Exception):
            raise self.text_result
        return self.text_result

    def analyze_video(self, video_bytes, mime_type, prompt, temperature=0.3, top_p=0.8):
        self.calls.append("analyze_video")
        result = self.video_results.pop(0) if len(self.video_results) > 1 else self.video_results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeChain:
    """Stands in for ChainClient; mints succeed with a fixed transaction hash."""

    def __init__(self, contract_address=CONTRACT_ADDRESS):
        self.contract_address = contract_address
        self.calls = []
        self.error = None

    def mint(self, recipient, metadata, signer):
        self.calls.append(("mint", recipient, signer.kind))
        if self.error:
            raise self.error
        tx_hash = getattr(signer, "transaction_hash", TX_HASH)
        return MintResult(transaction_hash=tx_hash, token_id="7", block_number=1234, signer=signer.kind)

    def check_connection(self, admin_private_key=None):
        self.calls.append(("check_connection",))
        return {"connected": True, "chainId": 80002, "contractAddress": self.contract_address}


@pytest.fixture
def fake_bedrock():
    return FakeBedrock()


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def services(fake_bedrock, fake_chain, sleeps, tmp_path):
    return Services(
        bedrock=fake_bedrock,
        images=ImageGenerator(fake_bedrock, str(tmp_path / "generated-nfts"), "http://testserver", "/generated-nfts"),
        videos=VideoAnalyzer(fake_bedrock, max_retries=2, backoff_seconds=1.0, sleep=sleeps.append),
        exercises=ExerciseGenerator(fake_bedrock),
        chain=fake_chain,
    )


@pytest.fixture
def app(services, tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
        "NFT_CONTRACT_ADDRESS": CONTRACT_ADDRESS,
        "ADMIN_PRIVATE_KEY": ADMIN_KEY,
        "PUBLIC_BASE_URL": "http://testserver",
        "GENERATED_NFT_DIR": str(tmp_path / "generated-nfts"),
    }, services=services)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_doctor(app):
    def _make(email="doctor@example.com", first_name="Sarah", last_name="Smith"):
        user = User(email=email, role="doctor")
        user.set_password("secret123")
        doctor = Doctor(user=user, email=email, first_name=first_name, last_name=last_name)
        db.session.add_all([user, doctor])
        db.session.commit()
        return doctor
    return _make


@pytest.fixture
def make_patient(app):
    def _make(email="patient@example.com", first_name="Alex", last_name="Johnson", doctor=None):
        user = User(email=email, role="patient")
        user.set_password("secret123")
        patient = Patient(user=user, email=email, first_name=first_name, last_name=last_name,
                          assigned_doctor=doctor)
        db.session.add_all([user, patient])
        db.session.commit()
        return patient
    return _make


@pytest.fixture
def make_completion(app):
    """A full exercise -> routine -> routine_exercise -> completion chain for a patient."""
    def _make(patient, doctor, exercise_name="Squats", nft_minted=False, created_at=None, score=85):
        exercise = Exercise(name=exercise_name, category="lower_body", difficulty_level=2,
                            default_sets=3, default_reps=10, instructions="Squat down")
        routine = Routine(patient_id=patient.id, prescribed_by_doctor_id=doctor.id, title="Knee rehab",
                          start_date=date.today(), frequency_per_week=3, is_active=True)
        db.session.add_all([exercise, routine])
        db.session.flush()
        link = RoutineExercise(routine_id=routine.id, exercise_id=exercise.id, sets=3, reps=10, order_in_routine=1)
        db.session.add(link)
        db.session.flush()
        completion = ExerciseCompletion(
            routine_exercise_id=link.id,
            patient_id=patient.id,
            completion_status="completed",
            form_score=score,
            nft_minted=nft_minted,
            created_at=created_at or datetime.utcnow() - timedelta(minutes=5),
        )
        db.session.add(completion)
        db.session.commit()
        return completion
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {"Authorization": f"Bearer {token}"}
    return _headers
