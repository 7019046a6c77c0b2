from conftest import ALICE, FIXED_NOW, VALID_INPUT

MOCK_MARKER = "(MOCK - No DB)"
SENTINEL_ID = "60d21b4667d0d8992e610c85"


def test_root(mock_client):
    r = mock_client.get("/")
    assert r.status_code == 200
    assert "version" in r.json()


def test_health_reports_store_down(mock_client):
    r = mock_client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["store_available"] is False
    assert any(m["name"] == "diabetes" for m in data["models"])


def test_missing_identity_is_401(mock_client):
    r = mock_client.get("/predictions")
    assert r.status_code == 401
    assert r.json() == {"status": "error", "message": "Missing authentication credentials"}


def test_create_without_db_returns_mock_record(mock_client):
    r = mock_client.post("/predictions", json=VALID_INPUT, headers=ALICE)
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "success"
    assert MOCK_MARKER in body["message"]

    data = body["data"]
    assert data["id"] == f"mock-{int(FIXED_NOW.timestamp() * 1000)}"
    # the normalized input is echoed: defaults filled in, numbers as floats
    assert data["inputData"] == dict(VALID_INPUT, age=45.0, bmi=27.1, hbA1cLevel=6.9, bloodGlucoseLevel=150.0, hypertension=False)

    result = data["result"]
    assert result["prediction"] in ("High Risk", "Low Risk")
    assert 0.0 <= result["riskScore"] <= 1.0
    assert set(result["recommendations"]) == {"lifestyle", "monitoring", "consultation"}


def test_create_with_only_optional_fields_omitted(mock_client):
    payload = {k: v for k, v in VALID_INPUT.items() if k not in ("hbA1cLevel", "bloodGlucoseLevel")}
    r = mock_client.post("/predictions", json=payload, headers=ALICE)
    assert r.status_code == 201
    assert "hbA1cLevel" not in r.json()["data"]["inputData"]


def test_create_missing_required_field_is_400(mock_client):
    payload = dict(VALID_INPUT)
    del payload["bmi"]
    r = mock_client.post("/predictions", json=payload, headers=ALICE)
    assert r.status_code == 400
    body = r.json()
    assert body["status"] == "error"
    assert body["message"] == '"bmi" is required'


def test_create_bad_optional_field_carries_hint(mock_client):
    payload = dict(VALID_INPUT, bloodGlucoseLevel="very high")
    r = mock_client.post("/predictions", json=payload, headers=ALICE)
    assert r.status_code == 400
    message = r.json()["message"]
    assert message.startswith('"bloodGlucoseLevel" must be a number')
    assert "continue without this value" in message


def test_create_rejects_non_object_body(mock_client):
    r = mock_client.post("/predictions", json=[1, 2, 3], headers=ALICE)
    assert r.status_code == 400
    assert r.json()["message"] == '"value" must be of type object'


def test_list_without_db_ignores_paging(mock_client):
    r = mock_client.get("/predictions?page=3&limit=50", headers=ALICE)
    assert r.status_code == 200
    data = r.json()["data"]
    assert len(data["predictions"]) == 5
    assert data["pagination"] == {"total": 5, "page": 1, "limit": 10, "pages": 1}
    assert all(p["owner"] == "alice" for p in data["predictions"])
    assert all(p["id"].startswith("mock-") for p in data["predictions"])


def test_list_rejects_non_integer_page(mock_client):
    r = mock_client.get("/predictions?page=abc", headers=ALICE)
    assert r.status_code == 400
    assert r.json()["message"] == '"page" must be a number'


def test_get_without_db_accepts_mock_and_sentinel_ids(mock_client):
    for prediction_id in ("mock-123", SENTINEL_ID):
        r = mock_client.get(f"/predictions/{prediction_id}", headers=ALICE)
        assert r.status_code == 200
        record = r.json()["data"]["prediction"]
        assert record["id"] == prediction_id
        assert record["result"]["riskScore"] == 0.75


def test_get_without_db_rejects_other_ids(mock_client):
    r = mock_client.get("/predictions/abc123", headers=ALICE)
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "Prediction not found"}


def test_delete_without_db(mock_client):
    r = mock_client.delete("/predictions/mock-1-1700000000000", headers=ALICE)
    assert r.status_code == 200
    assert r.json()["message"] == f"Prediction deleted successfully {MOCK_MARKER}"

    # nothing was stored, so deleting again behaves the same
    r = mock_client.delete("/predictions/mock-1-1700000000000", headers=ALICE)
    assert r.status_code == 200

    r = mock_client.delete("/predictions/not-a-mock", headers=ALICE)
    assert r.status_code == 404


def _post_raw(client, body):
    return client.post(
        "/predictions",
        content=body,
        headers={**ALICE, "Content-Type": "application/json"},
    )


def test_create_rejects_non_finite_required_number(mock_client):
    for literal in ("NaN", "Infinity", "1e400"):
        r = _post_raw(mock_client, (
            '{"gender": "Female", "age": 45, "heartDisease": false, '
            '"smokingHistory": "never", "bmi": %s}' % literal
        ))
        assert r.status_code == 400
        assert r.json() == {"status": "error", "message": '"bmi" must be a number'}


def test_create_rejects_non_finite_optional_number(mock_client):
    r = _post_raw(mock_client, (
        '{"gender": "Female", "age": 45, "heartDisease": false, '
        '"smokingHistory": "never", "bmi": 27.1, "bloodGlucoseLevel": -Infinity}'
    ))
    assert r.status_code == 400
    message = r.json()["message"]
    assert message.startswith('"bloodGlucoseLevel" must be a number')
    assert "continue without this value" in message
