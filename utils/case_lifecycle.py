"""Create and update cases, and resolve them through success stories."""
from __future__ import annotations

from typing import Dict

from flask import current_app

from models import CASE_MUTABLE_FIELDS, CASE_STATUSES, MissingPerson, SuccessStory, utcnow
from storage import CaseStorage


class CaseNotFoundError(Exception):
    """Raised when a referenced case does not exist."""


class NotCaseReporterError(Exception):
    """Raised when someone other than the reporter tries to change a case."""


class InvalidStatusTransitionError(Exception):
    """Raised when an update would move a found case back to missing."""


def _case_or_raise(storage: CaseStorage, case_id: int) -> MissingPerson:
    case = storage.get_case(case_id)
    if case is None:
        raise CaseNotFoundError(f"Missing person {case_id} not found")
    return case


def create_case(storage: CaseStorage, payload: Dict, reporter_id: int) -> MissingPerson:
    now = utcnow()
    fields = {key: payload.get(key) for key in CASE_MUTABLE_FIELDS}
    fields["status"] = fields.get("status") or "missing"
    if fields["status"] not in CASE_STATUSES:
        raise InvalidStatusTransitionError(f"Unknown status {fields['status']!r}")

    case = MissingPerson(**fields, reported_by=reporter_id, created_at=now, updated_at=now)
    storage.add_case(case)
    current_app.logger.info("Case created", extra={"case_id": case.id, "reported_by": reporter_id})
    return case


def ensure_case_reporter(storage: CaseStorage, case_id: int, user_id: int) -> MissingPerson:
    """Return the case if ``user_id`` reported it."""
    case = _case_or_raise(storage, case_id)
    if case.reported_by != user_id:
        current_app.logger.warning(
            "Case update rejected for non-reporter",
            extra={"case_id": case_id, "user_id": user_id, "reported_by": case.reported_by},
        )
        raise NotCaseReporterError("Not authorized to update this record")
    return case


def update_case(storage: CaseStorage, case_id: int, payload: Dict, user_id: int) -> MissingPerson:
    case = ensure_case_reporter(storage, case_id, user_id)

    changes = {key: payload.get(key) for key in CASE_MUTABLE_FIELDS}
    changes["status"] = changes.get("status") or case.status
    if changes["status"] not in CASE_STATUSES:
        raise InvalidStatusTransitionError(f"Unknown status {changes['status']!r}")
    if case.is_found and changes["status"] != "found":
        raise InvalidStatusTransitionError("A found person cannot be marked missing again")
    changes["updated_at"] = utcnow()

    storage.save_case(case, changes)
    current_app.logger.info("Case updated", extra={"case_id": case_id, "user_id": user_id})
    return case


def create_success_story(storage: CaseStorage, payload: Dict) -> SuccessStory:
    case_id = payload["missing_person_id"]
    _case_or_raise(storage, case_id)

    now = utcnow()
    story = SuccessStory(
        title=payload["title"],
        description=payload["description"],
        missing_person_id=case_id,
        photo_url=payload.get("photo_url"),
        created_at=now,
    )
    storage.add_success_story(story, found_at=now)
    current_app.logger.info("Success story published", extra={"story_id": story.id, "case_id": case_id})
    return story
