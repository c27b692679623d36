from sqlmodel import Session, select

from imtti import models


def test_admin_login_with_seed_credentials(client):
    r = client.post("/api/auth/admin", json={"email": "admin@imtti.com", "password": "admin123"})
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["user"]["email"] == "admin@imtti.com"
    assert data["user"]["name"] == "IMTTI Administrator"


def test_admin_login_wrong_password(client):
    r = client.post("/api/auth/admin", json={"email": "admin@imtti.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid credentials"}


def test_admin_login_without_body(client):
    r = client.post("/api/auth/admin")
    assert r.status_code == 401


def test_center_login(client):
    client.post("/api/centers", json={"name": "Alpha", "email": "a@x.com", "password": "p"})
    r = client.post("/api/auth/center", json={"email": "a@x.com", "password": "p"})
    assert r.status_code == 200
    assert r.json()["user"]["name"] == "Alpha"
    assert r.json()["user"]["is_active"] is True

    r = client.post("/api/auth/center", json={"email": "a@x.com", "password": "P"})
    assert r.status_code == 401


def test_inactive_center_cannot_log_in(client, database):
    center_id = client.post("/api/centers", json={"name": "Beta", "email": "b@x.com", "password": "p"}).json()["id"]
    with Session(database.engine) as session:
        center = session.exec(select(models.Center).where(models.Center.id == center_id)).one()
        center.is_active = False
        session.add(center)
        session.commit()

    r = client.post("/api/auth/center", json={"email": "b@x.com", "password": "p"})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_student_login_with_registration_id_and_birth_date(client):
    client.post("/api/students", json={
        "name": "Meera",
        "registration_id": "IMTTI-42",
        "date_of_birth": "1999-12-31",
    })
    r = client.post("/api/auth/student", json={"registration_id": "IMTTI-42", "date_of_birth": "1999-12-31"})
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["name"] == "Meera"
    assert user["date_of_birth"] == "1999-12-31"


def test_student_login_unknown_pair_is_401(client):
    client.post("/api/students", json={"name": "Meera", "registration_id": "IMTTI-42", "date_of_birth": "1999-12-31"})
    for payload in (
        {"registration_id": "IMTTI-42", "date_of_birth": "2000-01-01"},
        {"registration_id": "IMTTI-43", "date_of_birth": "1999-12-31"},
        {"registration_id": "IMTTI-42", "date_of_birth": "31/12/1999"},
        {"registration_id": "IMTTI-42"},
        {},
    ):
        r = client.post("/api/auth/student", json=payload)
        assert r.status_code == 401, payload
        assert r.json() == {"success": False, "message": "Invalid credentials"}


def test_student_without_identity_fields_cannot_log_in(client):
    client.post("/api/students", json={"name": "NoId"})
    r = client.post("/api/auth/student", json={})
    assert r.status_code == 401


def test_non_object_login_body_is_a_store_failure(client):
    for path in ("/api/auth/admin", "/api/auth/center", "/api/auth/student"):
        r = client.post(path, json=[1, 2])
        assert r.status_code == 500, path
        assert set(r.json()) == {"error"}


def test_lookup_failure_is_reported_as_500(client, database):
    with database.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE admins")
    r = client.post("/api/auth/admin", json={"email": "admin@imtti.com", "password": "admin123"})
    assert r.status_code == 500
    assert "admins" in r.json()["error"]
