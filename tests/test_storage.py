import threading

import pytest

from extensions import db
from models import MissingPerson, SuccessStory, User
from storage import StorageError
from storage.memory import MemoryStorage


def _drop_case_tables(app):
    with app.app_context():
        SuccessStory.__table__.drop(db.engine)
        MissingPerson.__table__.drop(db.engine)


def test_memory_user_lookups_during_registration():
    storage = MemoryStorage()
    done = threading.Event()
    errors = []

    def register_users():
        try:
            for n in range(1500):
                storage.create_user(User(username=f"user{n}", email=f"user{n}@registry.org", password_hash="x"))
        finally:
            done.set()

    def look_up():
        try:
            while not done.is_set():
                storage.get_user_by_username("nobody")
                storage.get_user_by_email("nobody@registry.org")
        except RuntimeError as exc:
            errors.append(str(exc))

    threads = [threading.Thread(target=register_users)] + [threading.Thread(target=look_up) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert storage.get_user_by_username("user1499").email == "user1499@registry.org"


def test_sql_read_failures_raise_storage_error(app, storage):
    if storage.name != "sql":
        pytest.skip("exercises relational read failures")
    _drop_case_tables(app)

    with pytest.raises(StorageError):
        storage.get_case(1)
    with pytest.raises(StorageError):
        storage.list_success_stories()
    with pytest.raises(StorageError):
        storage.count_cases()


def test_read_failures_use_route_messages(app, client):
    if app.config["STORAGE_BACKEND"] != "sql":
        pytest.skip("exercises relational read failures")
    _drop_case_tables(app)

    search = client.get("/api/missing-persons")
    assert search.status_code == 500
    assert search.get_json() == {"message": "Failed to fetch missing persons"}

    detail = client.get("/api/missing-persons/1")
    assert detail.status_code == 500
    assert detail.get_json() == {"message": "Failed to fetch missing person"}

    stories = client.get("/api/success-stories")
    assert stories.status_code == 500
    assert stories.get_json() == {"message": "Failed to fetch success stories"}
