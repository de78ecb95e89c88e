"""In-process storage used for tests and local experiments.

Records are plain (transient) model instances kept in dicts, so serialization
and matching behave exactly as they do for rows loaded from the database.
"""
from __future__ import annotations

from datetime import datetime
from itertools import count
from threading import Lock
from typing import Dict, List, Optional

from models import MissingPerson, SuccessStory, User
from storage import CaseStorage, StorageError
from utils.search import SearchCriteria, build_conditions


class MemoryStorage(CaseStorage):
    name = "memory"

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, User] = {}
        self._cases: Dict[int, MissingPerson] = {}
        self._stories: Dict[int, SuccessStory] = {}
        self._user_ids = count(1)
        self._case_ids = count(1)
        self._story_ids = count(1)

    def _users_snapshot(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._users_snapshot() if u.username == username), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        return next((u for u in self._users_snapshot() if (u.email or "").lower() == wanted), None)

    def create_user(self, user: User) -> User:
        with self._lock:
            if any(u.username == user.username or u.email.lower() == user.email.lower() for u in self._users.values()):
                raise StorageError("Username or email already registered")
            user.id = next(self._user_ids)
            self._users[user.id] = user
        return user

    def get_case(self, case_id: int) -> Optional[MissingPerson]:
        return self._cases.get(case_id)

    def search_cases(self, criteria: SearchCriteria) -> List[MissingPerson]:
        conditions = build_conditions(criteria)
        with self._lock:
            cases = sorted(self._cases.values(), key=lambda c: c.id)
        return [case for case in cases if all(cond.matches(case) for cond in conditions)]

    def add_case(self, case: MissingPerson) -> MissingPerson:
        with self._lock:
            case.id = next(self._case_ids)
            self._cases[case.id] = case
        return case

    def save_case(self, case: MissingPerson, changes: dict) -> MissingPerson:
        with self._lock:
            if case.id not in self._cases:
                raise StorageError(f"Case {case.id} does not exist")
            for key, value in changes.items():
                setattr(case, key, value)
        return case

    def list_success_stories(self) -> List[SuccessStory]:
        with self._lock:
            stories = list(self._stories.values())
        return sorted(stories, key=lambda s: (s.created_at, s.id), reverse=True)

    def add_success_story(self, story: SuccessStory, found_at: datetime) -> SuccessStory:
        with self._lock:
            case = self._cases.get(story.missing_person_id)
            if case is None:
                raise StorageError(f"Case {story.missing_person_id} does not exist")
            story.id = next(self._story_ids)
            self._stories[story.id] = story
            case.status = "found"
            case.updated_at = found_at
        return story

    def count_cases(self, status: Optional[str] = None, created_since: Optional[datetime] = None) -> int:
        with self._lock:
            cases = list(self._cases.values())
        return sum(
            1
            for case in cases
            if (status is None or case.status == status)
            and (created_since is None or case.created_at >= created_since)
        )

    def ping(self) -> int:
        return 2
