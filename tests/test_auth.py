from conftest import build_app, register


def test_register_logs_user_in(client):
    response = register(client, username="maria", email="Maria@Registry.org")

    assert response.status_code == 201
    user = response.get_json()
    assert user["username"] == "maria"
    assert user["email"] == "maria@registry.org"
    assert "password" not in user and "passwordHash" not in user

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.get_json()["id"] == user["id"]


def test_password_is_hashed(client, storage):
    register(client, username="maria", password="Sup3r-secret")
    stored = storage.get_user_by_username("maria")
    assert stored.password_hash != "Sup3r-secret"
    assert stored.password_hash.startswith("pbkdf2:sha256")
    assert stored.check_password("Sup3r-secret")
    assert not stored.check_password("wrong")


def test_duplicate_username_and_email_rejected(client, other_client):
    register(client, username="maria", email="maria@registry.org")
    response = register(other_client, username="maria", email="maria@registry.org")

    assert response.status_code == 400
    assert {"username", "email"} <= set(response.get_json()["errors"])


def test_weak_password_rejected(client):
    response = register(client, password="short")
    assert response.status_code == 400
    assert "password" in response.get_json()["errors"]


def test_login_and_logout(client, other_client):
    register(client, username="maria", password="Sup3r-secret")

    bad = other_client.post("/api/login", json={"username": "maria", "password": "nope"})
    assert bad.status_code == 401

    good = other_client.post("/api/login", json={"username": "maria", "password": "Sup3r-secret"})
    assert good.status_code == 200
    assert good.get_json()["username"] == "maria"
    assert other_client.get("/api/user").status_code == 200

    assert other_client.post("/api/logout").status_code == 200
    assert other_client.get("/api/user").status_code == 401


def test_current_user_requires_session(client):
    response = client.get("/api/user")
    assert response.status_code == 401


def test_csrf_enforced_when_enabled(tmp_path):
    app = build_app(tmp_path, backend="memory", WTF_CSRF_ENABLED=True)
    client = app.test_client()

    rejected = client.post("/api/login", json={"username": "ghost", "password": "whatever1"})
    assert rejected.status_code == 400

    token = client.get("/api/csrf-token").get_json()["csrfToken"]
    accepted = client.post(
        "/api/login",
        json={"username": "ghost", "password": "whatever1"},
        headers={"X-CSRFToken": token},
    )
    assert accepted.status_code == 401
