from molefit.models import Doctor, Patient


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["success"] is True


def test_health_db(client):
    res = client.get("/api/health/db")
    assert res.status_code == 200
    assert res.get_json()["data"] == {"status": "connected"}


def test_debug_env_reports_presence_only(client):
    res = client.get("/api/debug/env")

    data = res.get_json()["data"]
    assert data["NFT_CONTRACT_ADDRESS"] is True
    assert data["ADMIN_PRIVATE_KEY"] is True
    assert data["THIRDWEB_CLIENT_ID"] is False
    assert all(isinstance(v, bool) for v in data.values())


def test_sample_data_is_created_once(client):
    res = client.post("/api/setup-sample-data")
    assert res.status_code == 201
    assert Doctor.query.count() == 1
    patient = Patient.query.one()
    assert patient.assigned_doctor_id == Doctor.query.one().id

    res = client.post("/api/setup-sample-data")
    assert res.status_code == 200
    assert Patient.query.count() == 1


def test_unknown_route_is_json_404(client):
    res = client.get("/api/does-not-exist")
    assert res.status_code == 404
    assert res.get_json()["success"] is False
