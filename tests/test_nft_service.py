import pytest
from sqlalchemy.exc import OperationalError

from molefit.extensions import db
from molefit.models import NFT, ExerciseCompletion
from molefit.services.chain_service import MintResult
from molefit.services.nft_service import PersistAfterMintError, persist_minted_nft

from conftest import CONTRACT_ADDRESS, TX_HASH

METADATA = {"name": "Alex's Squats Achievement", "description": "Well done", "attributes": []}


def _persist(completion):
    return persist_minted_nft(
        completion.patient_id, completion.id, METADATA, "http://testserver/generated-nfts/nft-1.png", "prompt",
        "0xABC0000000000000000000000000000000000001",
        MintResult(transaction_hash=TX_HASH, token_id="7", block_number=1234, signer="admin_key"),
        "Squats", 85, "Easy", "Legs", CONTRACT_ADDRESS,
    )


def test_persist_marks_completion_minted(make_doctor, make_patient, make_completion):
    completion = make_completion(make_patient(), make_doctor())

    nft = _persist(completion)

    assert NFT.query.count() == 1
    assert nft.transaction_hash == TX_HASH
    stored = db.session.get(ExerciseCompletion, completion.id)
    assert stored.nft_minted is True
    assert stored.nft_token_id == "7"


def test_failed_commit_leaves_neither_row_nor_flag(monkeypatch, make_doctor, make_patient, make_completion):
    completion = make_completion(make_patient(), make_doctor())
    completion_id = completion.id

    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "commit", broken_commit)
    with pytest.raises(PersistAfterMintError) as exc:
        _persist(completion)
    monkeypatch.undo()

    assert exc.value.transaction_hash == TX_HASH
    assert exc.value.status_code == 500
    assert NFT.query.count() == 0
    assert db.session.get(ExerciseCompletion, completion_id).nft_minted is False


def test_unknown_completion_status_is_refused():
    with pytest.raises(ValueError):
        ExerciseCompletion(completion_status="skipped")
    assert ExerciseCompletion(completion_status="needs_improvement").completion_status == "needs_improvement"
