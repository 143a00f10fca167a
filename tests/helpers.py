import base64

API_KEY_HEADER = {"x-api-key": "test_key"}

MANDATORY_TYPES = ["aadhar_card", "pan_card", "passport_photo", "education_certificate", "bank_proof"]


def fake_pdf_bytes() -> bytes:
    # minimal content: enough for the upload checks, page count may be 0
    return b"%PDF-1.4\n%EOF\n"


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def onboarding_payload(employee_id: str, **overrides) -> dict:
    data = {
        "employee_id": employee_id,
        "employee_name": "Asha Verma",
        "date_of_birth": "1994-03-12",
        "gender": "female",
        "nationality": "Indian",
        "marital_status": "single",
        "number_of_kids": 2,
        "personal_email": "asha@example.com",
        "contact_number": "9876543210",
        "current_address": "12 MG Road",
        "current_city": "Bengaluru",
        "state": "Karnataka",
        "joining_date": "2024-07-01",
        "reporting_manager": "R. Iyer",
        "office_time": "09:30-18:30",
        "office_department": "Engineering",
        "job_status": "full_time",
        "job_title": "Backend Developer",
        "aadhar_card": "1234 5678 9012",
        "pan_number": "ABCDE1234F",
        "emergency_contact_person": "Ravi Verma",
        "emergency_contact_number": "9123456780",
        "emergency_relationship": "brother",
        "blood_type": "O+",
        "has_health_problem": False,
        "health_problem_details": "should be dropped",
        "account_holder_name": "Asha Verma",
        "bank_name": "State Bank",
        "account_number": "001122334455",
        "ifsc_code": "SBIN0001234",
    }
    data.update(overrides)
    return data


def create_employee(client, name="Asha Verma", department="Engineering") -> str:
    r = client.post("/employees", json={"name": name, "department": department}, headers=API_KEY_HEADER)
    assert r.status_code == 201, r.text
    return r.json()["employee_id"]


def complete_onboarding(client, employee_id: str) -> None:
    r = client.post("/onboarding", json=onboarding_payload(employee_id))
    assert r.status_code == 201, r.text


def upload_document(client, employee_id: str, doc_type: str, status: str = "completed"):
    return client.post(
        "/employee-documents",
        json={
            "employeeId": employee_id,
            "documentType": doc_type,
            "documentName": doc_type.replace("_", " ").title(),
            "fileName": f"{doc_type}.pdf",
            "fileContentBase64": b64(fake_pdf_bytes()),
            "fileSizeBytes": len(fake_pdf_bytes()),
            "mimeType": "application/pdf",
            "status": status,
        },
    )


def complete_documents(client, employee_id: str) -> None:
    for doc_type in MANDATORY_TYPES:
        r = upload_document(client, employee_id, doc_type)
        assert r.status_code == 200, r.text


def acknowledge_all(client, employee_id: str) -> None:
    cats = client.get("/policy-categories").json()["categories"]
    for c in cats:
        r = client.post("/policy-acknowledgements", json={"employeeId": employee_id, "policyCategoryId": c["id"]})
        assert r.status_code == 200, r.text


def ready_for_assessments(client) -> str:
    emp = create_employee(client)
    complete_onboarding(client, emp)
    complete_documents(client, emp)
    acknowledge_all(client, emp)
    return emp
