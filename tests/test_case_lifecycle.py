from datetime import datetime

import pytest

from models import SuccessStory
from storage import StorageError
from utils import case_lifecycle
from utils.case_lifecycle import (
    CaseNotFoundError,
    InvalidStatusTransitionError,
    NotCaseReporterError,
    create_case,
    create_success_story,
    update_case,
)

PAYLOAD = {
    "name": "Joao Pereira",
    "age": 8,
    "gender": "Male",
    "last_location": "Fortaleza, CE",
    "last_seen_date": datetime(2024, 6, 1, 14, 0),
    "contact_name": "Rita Pereira",
    "contact_phone": "+55 85 98888-1111",
}


def test_create_case_defaults_status_and_timestamps(storage, reporter):
    case = create_case(storage, dict(PAYLOAD), reporter_id=reporter.id)

    assert case.id is not None
    assert case.status == "missing"
    assert case.reported_by == reporter.id
    assert case.created_at == case.updated_at
    assert storage.get_case(case.id).name == "Joao Pereira"


def test_update_requires_existing_case(storage, reporter):
    with pytest.raises(CaseNotFoundError):
        update_case(storage, 999, dict(PAYLOAD), user_id=reporter.id)


def test_update_rejects_non_reporter(storage, reporter, make_case):
    case = make_case()
    with pytest.raises(NotCaseReporterError):
        update_case(storage, case.id, dict(PAYLOAD), user_id=reporter.id + 1)
    assert storage.get_case(case.id).name == "Ana Silva"


def test_update_replaces_fields_and_refreshes_timestamp(storage, reporter, make_case, monkeypatch):
    case = make_case(created_at=datetime(2024, 1, 1))
    later = datetime(2024, 7, 1, 9, 0)
    monkeypatch.setattr(case_lifecycle, "utcnow", lambda: later)

    updated = update_case(storage, case.id, dict(PAYLOAD, height="1.20m"), user_id=reporter.id)

    assert updated.name == "Joao Pereira"
    assert updated.height == "1.20m"
    assert updated.reported_by == reporter.id
    assert updated.status == "missing"
    assert updated.updated_at == later
    assert updated.created_at == datetime(2024, 1, 1)


def test_update_cannot_reopen_found_case(storage, reporter, make_case):
    case = make_case(status="found")
    with pytest.raises(InvalidStatusTransitionError):
        update_case(storage, case.id, dict(PAYLOAD, status="missing"), user_id=reporter.id)
    assert storage.get_case(case.id).status == "found"


def test_update_without_status_keeps_current_status(storage, reporter, make_case):
    case = make_case(status="found")
    updated = update_case(storage, case.id, dict(PAYLOAD), user_id=reporter.id)
    assert updated.status == "found"


def test_success_story_marks_case_found(storage, make_case, monkeypatch):
    case = make_case(created_at=datetime(2024, 1, 1))
    found_at = datetime(2024, 8, 2, 10, 30)
    monkeypatch.setattr(case_lifecycle, "utcnow", lambda: found_at)

    story = create_success_story(
        storage, {"title": "Back home", "description": "Found safe", "missing_person_id": case.id}
    )

    assert story.id is not None
    assert story.created_at == found_at
    refreshed = storage.get_case(case.id)
    assert refreshed.status == "found"
    assert refreshed.updated_at == found_at
    assert [s.id for s in storage.list_success_stories()] == [story.id]


def test_success_story_requires_existing_case(storage):
    with pytest.raises(CaseNotFoundError):
        create_success_story(storage, {"title": "t", "description": "d", "missing_person_id": 42})
    assert storage.list_success_stories() == []


def test_success_story_is_all_or_nothing(app, storage, make_case):
    if storage.name != "sql":
        pytest.skip("transaction rollback is a relational-store guarantee")
    case = make_case()
    broken = SuccessStory(title=None, description="d", missing_person_id=case.id, created_at=datetime(2024, 1, 1))

    with pytest.raises(StorageError):
        storage.add_success_story(broken, found_at=datetime(2024, 1, 2))

    assert storage.get_case(case.id).status == "missing"
    assert storage.list_success_stories() == []
