from helpers import API_KEY_HEADER


def test_first_admin_registers_without_key(test_client):
    r = test_client.post("/auth/admin/register", json={"username": "hr_admin", "password": "s3cret-pass"})
    assert r.status_code == 201, r.text
    assert r.json() == {"success": True, "username": "hr_admin"}


def test_next_admin_needs_api_key(test_client):
    test_client.post("/auth/admin/register", json={"username": "first", "password": "s3cret-pass"})

    r = test_client.post("/auth/admin/register", json={"username": "second", "password": "s3cret-pass"})
    assert r.status_code == 401

    r = test_client.post(
        "/auth/admin/register",
        json={"username": "second", "password": "s3cret-pass"},
        headers=API_KEY_HEADER,
    )
    assert r.status_code == 201


def test_duplicate_username_conflict(test_client):
    body = {"username": "hr_admin", "password": "s3cret-pass"}
    assert test_client.post("/auth/admin/register", json=body).status_code == 201
    r = test_client.post("/auth/admin/register", json=body, headers=API_KEY_HEADER)
    assert r.status_code == 409


def test_password_rules(test_client):
    r = test_client.post("/auth/admin/register", json={"username": "hr_admin", "password": "short"})
    assert r.status_code == 422

    r = test_client.post("/auth/admin/register", json={"username": "hr_admin", "password": "é" * 40})
    assert r.status_code == 422


def test_login(test_client):
    test_client.post("/auth/admin/register", json={"username": "hr_admin", "password": "s3cret-pass"})

    r = test_client.post("/auth/admin/login", json={"username": "hr_admin", "password": "s3cret-pass"})
    assert r.status_code == 200
    assert r.json()["success"] is True

    r = test_client.post("/auth/admin/login", json={"username": "hr_admin", "password": "wrong-pass"})
    assert r.status_code == 401

    r = test_client.post("/auth/admin/login", json={"username": "nobody", "password": "s3cret-pass"})
    assert r.status_code == 401


def test_admin_routes_require_key(test_client):
    assert test_client.get("/employees").status_code == 401
    assert test_client.get("/employees", headers={"x-api-key": "wrong"}).status_code == 401
    assert test_client.get("/employees", headers=API_KEY_HEADER).status_code == 200
