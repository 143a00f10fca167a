from helpers import create_employee, onboarding_payload

from pulsehr.services.onboarding import clean_conditionals, missing_required


def test_steps(test_client):
    r = test_client.get("/onboarding/steps")
    assert r.status_code == 200
    data = r.json()
    assert len(data["steps"]) == 10
    assert data["steps"][0]["title"] == "Employee Details"
    assert "O+" in data["blood_types"]
    assert "Karnataka" in data["states"]


def test_submit_and_read_back(test_client):
    eid = create_employee(test_client)

    r = test_client.post("/onboarding", json=onboarding_payload(eid))
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["completed"] is True
    assert data["submitted_at"]
    # single, no health problem: conditional answers dropped
    assert data["number_of_kids"] == 0
    assert data["health_problem_details"] == ""

    r = test_client.get(f"/onboarding/{eid}")
    assert r.status_code == 200
    assert r.json()["date_of_birth"] == "1994-03-12"

    r = test_client.get(f"/employees/{eid}")
    assert r.json()["onboarding_completed"] is True


def test_conditionals_kept_when_relevant(test_client):
    eid = create_employee(test_client)
    body = onboarding_payload(
        eid,
        marital_status="married",
        number_of_kids=1,
        has_health_problem=True,
        health_problem_details="Asthma",
    )
    r = test_client.post("/onboarding", json=body)
    assert r.status_code == 201
    assert r.json()["number_of_kids"] == 1
    assert r.json()["health_problem_details"] == "Asthma"


def test_second_submission_conflict(test_client):
    eid = create_employee(test_client)
    assert test_client.post("/onboarding", json=onboarding_payload(eid)).status_code == 201
    assert test_client.post("/onboarding", json=onboarding_payload(eid)).status_code == 409


def test_missing_required_fields(test_client):
    eid = create_employee(test_client)
    r = test_client.post("/onboarding", json=onboarding_payload(eid, ifsc_code="", pan_number="  "))
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert "ifsc_code" in detail and "pan_number" in detail
    assert test_client.get(f"/onboarding/{eid}").status_code == 404


def test_invalid_values(test_client):
    eid = create_employee(test_client)
    assert test_client.post("/onboarding", json=onboarding_payload(eid, blood_type="Z+")).status_code == 422
    assert test_client.post("/onboarding", json=onboarding_payload(eid, date_of_birth="12/03/1994")).status_code == 422


def test_unknown_employee(test_client):
    assert test_client.post("/onboarding", json=onboarding_payload("BST00000")).status_code == 404


def test_missing_required_groups_by_step():
    missing = missing_required({"employee_name": "A", "blood_type": ""})
    assert "employee_name" not in missing["Employee Details"]
    assert missing["Health Information"] == ["blood_type"]
    assert "Nominee Details" not in missing


def test_clean_conditionals():
    out = clean_conditionals({"marital_status": "Married", "number_of_kids": 3, "has_health_problem": False,
                              "health_problem_details": "x"})
    assert out["number_of_kids"] == 3
    assert out["health_problem_details"] == ""
