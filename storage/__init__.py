"""Storage backends for the registry, selected by the STORAGE_BACKEND setting."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from flask import Flask, current_app

from models import MissingPerson, SuccessStory, User
from utils.search import SearchCriteria

EXTENSION_KEY = "case_storage"


class StorageError(Exception):
    """Raised when the underlying data store fails."""


class CaseStorage(ABC):
    """Persistence operations the registry core relies on."""

    name = "abstract"

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def create_user(self, user: User) -> User:
        ...

    @abstractmethod
    def get_case(self, case_id: int) -> Optional[MissingPerson]:
        ...

    @abstractmethod
    def search_cases(self, criteria: SearchCriteria) -> List[MissingPerson]:
        ...

    @abstractmethod
    def add_case(self, case: MissingPerson) -> MissingPerson:
        ...

    @abstractmethod
    def save_case(self, case: MissingPerson, changes: dict) -> MissingPerson:
        """Apply ``changes`` to an existing case and persist it."""

    @abstractmethod
    def list_success_stories(self) -> List[SuccessStory]:
        ...

    @abstractmethod
    def add_success_story(self, story: SuccessStory, found_at: datetime) -> SuccessStory:
        """Insert ``story`` and mark its case found, all or nothing."""

    @abstractmethod
    def count_cases(self, status: Optional[str] = None, created_since: Optional[datetime] = None) -> int:
        ...

    @abstractmethod
    def ping(self) -> int:
        """Round-trip to the store; returns 2 on success."""


def build_storage(app: Flask) -> CaseStorage:
    backend = (app.config.get("STORAGE_BACKEND") or "sql").lower()
    if backend == "memory":
        from storage.memory import MemoryStorage

        return MemoryStorage()
    if backend == "sql":
        from storage.sql import SqlStorage

        return SqlStorage()
    raise ValueError(f"Unsupported STORAGE_BACKEND {backend!r}")


def init_storage(app: Flask) -> CaseStorage:
    storage = build_storage(app)
    app.extensions[EXTENSION_KEY] = storage
    app.logger.info("Storage initialized", extra={"backend": storage.name})
    return storage


def get_storage() -> CaseStorage:
    return current_app.extensions[EXTENSION_KEY]
