import os

import pytest

from molefit.extensions import db
from molefit.models import NFT, Exercise, ExerciseCompletion, Routine, RoutineExercise
from molefit.errors import MintError

from conftest import CONTRACT_ADDRESS, TX_HASH

MINT_BODY = {
    "walletAddress": "0xABC0000000000000000000000000000000000001",
    "exerciseType": "Push-ups",
    "completionScore": 92,
    "difficulty": "Intermediate",
    "bodyPart": "Chest and Arms",
    "playerName": "Alex",
}


@pytest.mark.parametrize("missing", ["walletAddress", "exerciseType", "completionScore"])
def test_missing_required_field_is_rejected_before_any_call(client, fake_bedrock, fake_chain,
                                                            make_doctor, make_patient, missing):
    make_doctor()
    make_patient()
    body = {k: v for k, v in MINT_BODY.items() if k != missing}

    res = client.post("/api/nft/generate-and-mint", json=body)

    assert res.status_code == 400
    payload = res.get_json()
    assert payload["success"] is False
    assert missing in payload["message"]
    assert fake_bedrock.calls == []
    assert fake_chain.calls == []
    assert ExerciseCompletion.query.count() == 0


def test_empty_string_counts_as_missing(client, fake_chain):
    res = client.post("/api/nft/generate-and-mint", json={**MINT_BODY, "walletAddress": ""})

    assert res.status_code == 400
    assert "walletAddress" in res.get_json()["message"]
    assert fake_chain.calls == []


def test_generate_and_mint_end_to_end(client, fake_chain, make_doctor, make_patient):
    make_doctor()
    patient = make_patient()

    res = client.post("/api/nft/generate-and-mint", json=MINT_BODY)

    assert res.status_code == 200, res.get_json()
    data = res.get_json()["data"]
    assert data["transactionHash"] == TX_HASH
    assert data["polygonScanUrl"] == f"https://amoy.polygonscan.com/tx/{TX_HASH}"
    assert data["contractAddress"] == CONTRACT_ADDRESS
    assert data["mintedTo"] == MINT_BODY["walletAddress"]
    assert data["signer"] == "admin_key"
    image_url = data["nftMetadata"]["image"]
    assert image_url.startswith("http://testserver/generated-nfts/nft-")
    served = client.get(image_url.replace("http://testserver", ""))
    assert served.status_code == 200
    assert served.data.startswith(b"\x89PNG")

    exercises = Exercise.query.all()
    assert [e.name for e in exercises] == ["Push-ups"]
    routines = Routine.query.all()
    assert len(routines) == 1 and routines[0].is_active and routines[0].patient_id == patient.id
    links = RoutineExercise.query.all()
    assert len(links) == 1 and links[0].sets == 3 and links[0].reps == 10
    completions = ExerciseCompletion.query.all()
    assert len(completions) == 1 and completions[0].form_score == 92
    assert completions[0].nft_minted is True
    assert completions[0].nft_token_id == "7"
    nfts = NFT.query.all()
    assert len(nfts) == 1 and nfts[0].rarity == "Epic"

    assert data["patientId"] == patient.id
    assert data["exerciseCompletionId"] == completions[0].id
    assert data["nftId"] == nfts[0].id
    assert fake_chain.calls == [("mint", MINT_BODY["walletAddress"], "admin_key")]


def test_existing_completion_only_adds_the_nft(client, make_doctor, make_patient, make_completion):
    doctor = make_doctor()
    patient = make_patient()
    completion = make_completion(patient, doctor)

    res = client.post("/api/nft/generate-and-mint", json={**MINT_BODY, "exerciseCompletionId": completion.id})

    assert res.status_code == 200
    assert Exercise.query.count() == 1
    assert Routine.query.count() == 1
    assert RoutineExercise.query.count() == 1
    assert ExerciseCompletion.query.count() == 1
    assert NFT.query.count() == 1
    assert db.session.get(ExerciseCompletion, completion.id).nft_minted is True


def test_mint_failure_writes_no_nft(client, fake_chain, make_doctor, make_patient):
    make_doctor()
    make_patient()
    fake_chain.error = MintError("execution reverted")

    res = client.post("/api/nft/generate-and-mint", json=MINT_BODY)

    assert res.status_code == 500
    payload = res.get_json()
    assert payload == {"success": False, "error": "NFT minting failed", "message": "execution reverted"}
    assert NFT.query.count() == 0
    # provisioned rows stay behind
    assert ExerciseCompletion.query.count() == 1


def test_unexpected_failure_is_wrapped(client, fake_chain, make_doctor, make_patient):
    make_doctor()
    make_patient()
    fake_chain.error = RuntimeError("rpc exploded")

    res = client.post("/api/nft/generate-and-mint", json=MINT_BODY)

    assert res.status_code == 500
    assert res.get_json() == {"success": False, "error": "Failed to generate and mint NFT", "message": "rpc exploded"}


def test_missing_contract_address_names_the_setting(app, client, fake_chain, make_doctor, make_patient):
    make_doctor()
    make_patient()
    app.config["NFT_CONTRACT_ADDRESS"] = None

    res = client.post("/api/nft/generate-and-mint", json=MINT_BODY)

    assert res.status_code == 500
    assert "NFT_CONTRACT_ADDRESS" in res.get_json()["message"]
    assert fake_chain.calls == []


def test_no_patient_returns_400(client):
    res = client.post("/api/nft/generate-and-mint", json=MINT_BODY)

    assert res.status_code == 400
    assert res.get_json()["error"] == "No patient available"


def test_generate_image_falls_back_when_model_fails(client, fake_bedrock, fake_chain):
    fake_bedrock.image_result = RuntimeError("ServiceQuotaExceededException")
    body = {k: MINT_BODY[k] for k in ("exerciseType", "completionScore", "difficulty", "bodyPart", "playerName")}

    res = client.post("/api/nft/generate-image", json=body)

    assert res.status_code == 200
    data = res.get_json()["data"]
    assert "photo-1571019613454-1cb2f99b2d8b" in data["imageUrl"]
    assert data["nftMetadata"]["image"] == data["imageUrl"]
    assert "Alex's Mole Achievement" in data["imagePrompt"]
    assert fake_chain.calls == []


def test_generate_image_requires_body_part(client):
    res = client.post("/api/nft/generate-image", json={"exerciseType": "Squats", "completionScore": 80,
                                                        "difficulty": "Easy"})
    assert res.status_code == 400
    assert "bodyPart" in res.get_json()["message"]


def test_direct_mint_uses_admin_key(client, fake_chain):
    res = client.post("/api/nft/mint", json={"recipientAddress": MINT_BODY["walletAddress"],
                                             "metadata": {"name": "Test"}})

    assert res.status_code == 200
    assert res.get_json()["data"]["signer"] == "admin_key"
    assert fake_chain.calls[0][2] == "admin_key"


def test_save_to_database_records_wallet_mint(client, fake_chain, make_doctor, make_patient, make_completion):
    doctor = make_doctor()
    patient = make_patient()
    completion = make_completion(patient, doctor)
    wallet_tx = "0x" + "ef" * 32
    body = {
        "patientId": patient.id,
        "exerciseCompletionId": completion.id,
        "nftMetadata": {"name": "Alex's Squats Achievement", "description": "Well done", "attributes": []},
        "imageUrl": "http://testserver/static/generated-nfts/nft-1.png",
        "walletAddress": MINT_BODY["walletAddress"],
        "transactionHash": wallet_tx,
        "exerciseType": "Squats",
        "completionScore": 96,
        "difficulty": "Easy",
        "bodyPart": "Legs",
    }

    res = client.post("/api/nft/save-to-database", json=body)

    assert res.status_code == 201
    nft = res.get_json()["data"]
    assert nft["transaction_hash"] == wallet_tx
    assert nft["signer"] == "user_wallet"
    assert nft["rarity"] == "Legendary"
    assert fake_chain.calls == [("mint", MINT_BODY["walletAddress"], "user_wallet")]

    # the same transaction recorded twice is returned, not duplicated
    again = client.post("/api/nft/save-to-database", json=body)
    assert again.status_code == 201
    assert again.get_json()["data"]["id"] == nft["id"]
    assert NFT.query.count() == 1


def test_save_to_database_unknown_patient(client):
    body = {
        "patientId": "nope", "exerciseCompletionId": "nope", "nftMetadata": {"name": "x"},
        "imageUrl": "http://img", "walletAddress": "0x1", "transactionHash": "0x2",
        "exerciseType": "Squats", "completionScore": 50, "difficulty": "Easy", "bodyPart": "Legs",
    }
    res = client.post("/api/nft/save-to-database", json=body)
    assert res.status_code == 404


def test_connection_check(client, fake_chain):
    res = client.get("/api/nft/test-connection")

    assert res.status_code == 200
    assert res.get_json()["data"]["connected"] is True


def test_completion_of_another_patient_is_rejected(client, fake_chain, make_doctor, make_patient, make_completion):
    doctor = make_doctor()
    alex = make_patient()
    sam = make_patient(email="sam@example.com", first_name="Sam")
    completion = make_completion(sam, doctor)

    res = client.post("/api/nft/generate-and-mint",
                      json={**MINT_BODY, "patientId": alex.id, "exerciseCompletionId": completion.id})

    assert res.status_code == 400
    assert fake_chain.calls == []
    assert NFT.query.count() == 0
    assert db.session.get(ExerciseCompletion, completion.id).nft_minted is False


def test_different_scores_in_one_window_both_mint(client, fake_chain, make_doctor, make_patient):
    make_doctor()
    make_patient()

    first = client.post("/api/nft/generate-and-mint", json={**MINT_BODY, "completionScore": 92})
    second = client.post("/api/nft/generate-and-mint", json={**MINT_BODY, "completionScore": 97})

    assert first.status_code == 200
    assert second.status_code == 200
    assert ExerciseCompletion.query.count() == 2
    assert sorted(n.rarity for n in NFT.query.all()) == ["Epic", "Legendary"]


def test_generated_images_are_served_from_custom_dir(app, client):
    assert app.config["GENERATED_NFT_URL_PATH"] == "/generated-nfts"
    os.makedirs(app.config["GENERATED_NFT_DIR"], exist_ok=True)
    with open(os.path.join(app.config["GENERATED_NFT_DIR"], "nft-1.png"), "wb") as fh:
        fh.write(b"\x89PNG")

    assert client.get("/generated-nfts/nft-1.png").status_code == 200
    assert client.get("/generated-nfts/missing.png").status_code == 404


def test_default_image_dir_is_served_as_static(services, monkeypatch):
    from molefit import create_app

    monkeypatch.delenv("GENERATED_NFT_DIR", raising=False)
    monkeypatch.delenv("GENERATED_NFT_URL_PATH", raising=False)
    app = create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://"}, services=services)

    assert app.config["GENERATED_NFT_URL_PATH"] == "/static/generated-nfts"
