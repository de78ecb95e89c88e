from datetime import datetime

import pytest

from app import create_app
from extensions import db
from models import MissingPerson, User, utcnow
from storage import get_storage


def build_app(tmp_path, backend="sql", **overrides):
    config = {"STORAGE_BACKEND": backend, "LOG_DIR": str(tmp_path / "logs")}
    config.update(overrides)
    return create_app("testing", config)


@pytest.fixture(params=["sql", "memory"])
def app(request, tmp_path):
    application = build_app(tmp_path, backend=request.param)
    yield application
    if request.param == "sql":
        with application.app_context():
            db.drop_all()


@pytest.fixture
def app_context(app):
    # HTTP tests stay outside this context so each request gets a fresh `g`.
    with app.app_context():
        yield
        db.session.remove()


@pytest.fixture
def storage(app, app_context):
    return get_storage()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def other_client(app):
    return app.test_client()


@pytest.fixture
def reporter(storage):
    user = User(username="reporter", email="reporter@registry.org", name="Case Reporter", created_at=utcnow())
    user.set_password("s3cret-pass")
    return storage.create_user(user)


@pytest.fixture
def make_case(storage, reporter):
    def _make_case(**fields):
        now = fields.pop("created_at", None) or utcnow()
        values = {
            "name": "Ana Silva",
            "age": 34,
            "gender": "Female",
            "last_location": "Porto Alegre, RS",
            "last_seen_date": datetime(2024, 3, 5, 18, 30),
            "status": "missing",
            "contact_name": "Maria Silva",
            "contact_phone": "+55 51 99999-0000",
            "reported_by": reporter.id,
            "created_at": now,
            "updated_at": now,
        }
        values.update(fields)
        return storage.add_case(MissingPerson(**values))

    return _make_case


def case_payload(**overrides):
    payload = {
        "name": "Ana Silva",
        "age": 34,
        "gender": "Female",
        "height": "1.65m",
        "bloodType": "O+",
        "characteristics": "Scar on left hand",
        "lastLocation": "Porto Alegre, RS",
        "lastSeenDate": "2024-03-05T18:30:00",
        "disappearanceCircumstances": "Left work and did not arrive home",
        "contactName": "Maria Silva",
        "contactPhone": "+55 51 99999-0000",
        "contactEmail": "maria@registry.org",
        "photoUrl": "https://img.registry.org/ana.jpg",
    }
    payload.update(overrides)
    return payload


def register(client, username="ana.reporter", email=None, password="Sup3r-secret", name="Ana Reporter"):
    return client.post(
        "/api/register",
        json={
            "username": username,
            "password": password,
            "email": email or f"{username}@registry.org",
            "name": name,
        },
    )
