from datetime import datetime

from conftest import ALICE, BOB, VALID_INPUT


def _create(client, headers=ALICE, **overrides):
    r = client.post("/predictions", json=dict(VALID_INPUT, **overrides), headers=headers)
    assert r.status_code == 201
    return r.json()["data"]


def test_create_then_fetch_round_trips(db_client):
    created = _create(db_client)
    assert not created["id"].startswith("mock-")
    assert created["result"]["prediction"] == "Low Risk"
    assert created["result"]["riskScore"] == 0.2
    # engine gave no recommendations, so they were composed
    assert "Aim for gradual weight reduction (5-7% of body weight)" in created["result"]["recommendations"]["lifestyle"]

    r = db_client.get(f"/predictions/{created['id']}", headers=ALICE)
    assert r.status_code == 200
    fetched = r.json()["data"]["prediction"]
    assert fetched["owner"] == "alice"
    assert fetched["inputData"] == created["inputData"]
    assert fetched["result"] == created["result"]


def test_create_message_has_no_mock_marker(db_client):
    r = db_client.post("/predictions", json=VALID_INPUT, headers=ALICE)
    assert r.json()["message"] == "Prediction created successfully"


def test_delete_then_fetch_is_404(db_client):
    created = _create(db_client)

    r = db_client.delete(f"/predictions/{created['id']}", headers=ALICE)
    assert r.status_code == 200
    assert r.json() == {"status": "success", "message": "Prediction deleted successfully"}

    r = db_client.get(f"/predictions/{created['id']}", headers=ALICE)
    assert r.status_code == 404

    r = db_client.delete(f"/predictions/{created['id']}", headers=ALICE)
    assert r.status_code == 404


def test_list_is_newest_first_with_pagination(db_client):
    for age in (30, 40, 50):
        _create(db_client, age=age)

    r = db_client.get("/predictions", headers=ALICE)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["pagination"] == {"total": 3, "page": 1, "limit": 10, "pages": 1}

    stamps = [datetime.fromisoformat(p["createdAt"]) for p in data["predictions"]]
    assert stamps == sorted(stamps, reverse=True)


def test_list_applies_page_and_limit(db_client):
    for _ in range(3):
        _create(db_client)

    r = db_client.get("/predictions?page=2&limit=2", headers=ALICE)
    data = r.json()["data"]
    assert len(data["predictions"]) == 1
    assert data["pagination"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}


def test_records_are_owner_scoped(db_client):
    created = _create(db_client)

    assert db_client.get(f"/predictions/{created['id']}", headers=BOB).status_code == 404
    r = db_client.delete(f"/predictions/{created['id']}", headers=BOB)
    assert r.status_code == 404
    assert r.json()["message"] == "Prediction not found or you don't have permission to delete it"

    r = db_client.get("/predictions", headers=BOB)
    assert r.json()["data"]["pagination"]["total"] == 0

    # still there for the owner
    assert db_client.get(f"/predictions/{created['id']}", headers=ALICE).status_code == 200


def test_delete_unknown_id_is_404(db_client):
    r = db_client.delete("/predictions/does-not-exist", headers=ALICE)
    assert r.status_code == 404
    assert r.json()["status"] == "error"


def test_non_finite_input_is_not_stored(db_client):
    r = db_client.post(
        "/predictions",
        content=(
            '{"gender": "Male", "age": 50, "heartDisease": false, '
            '"smokingHistory": "current", "bmi": 30, "bloodGlucoseLevel": Infinity}'
        ),
        headers={**ALICE, "Content-Type": "application/json"},
    )
    assert r.status_code == 400

    r = db_client.get("/predictions", headers=ALICE)
    assert r.status_code == 200
    assert r.json()["data"]["pagination"]["total"] == 0
