"""Relational storage on top of Flask-SQLAlchemy."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from flask import current_app
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import MissingPerson, SuccessStory, User
from storage import CaseStorage, StorageError
from utils.search import SearchCriteria, build_conditions


class SqlStorage(CaseStorage):
    name = "sql"

    @contextmanager
    def _reading(self, action: str, message: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning("Storage read failed", extra={"action": action})
            raise StorageError(message or f"{action} failed") from exc

    def _commit(self, action: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning("Storage commit failed", extra={"action": action})
            raise StorageError(f"{action} failed") from exc

    def get_user(self, user_id: int) -> Optional[User]:
        with self._reading("get_user"):
            return db.session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._reading("get_user_by_username"):
            return User.query.filter_by(username=username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._reading("get_user_by_email"):
            return User.query.filter(func.lower(User.email) == email.lower()).first()

    def create_user(self, user: User) -> User:
        db.session.add(user)
        self._commit("create_user")
        return user

    def get_case(self, case_id: int) -> Optional[MissingPerson]:
        with self._reading("get_case"):
            return db.session.get(MissingPerson, case_id)

    def search_cases(self, criteria: SearchCriteria) -> List[MissingPerson]:
        clauses = [condition.to_clause(MissingPerson) for condition in build_conditions(criteria)]
        with self._reading("search_cases"):
            return MissingPerson.query.filter(*clauses).order_by(MissingPerson.id.asc()).all()

    def add_case(self, case: MissingPerson) -> MissingPerson:
        db.session.add(case)
        self._commit("add_case")
        return case

    def save_case(self, case: MissingPerson, changes: dict) -> MissingPerson:
        for key, value in changes.items():
            setattr(case, key, value)
        db.session.add(case)
        self._commit("save_case")
        return case

    def list_success_stories(self) -> List[SuccessStory]:
        with self._reading("list_success_stories"):
            return SuccessStory.query.order_by(SuccessStory.created_at.desc(), SuccessStory.id.desc()).all()

    def add_success_story(self, story: SuccessStory, found_at: datetime) -> SuccessStory:
        # Status flip and story insert share one transaction.
        with self._reading("add_success_story"):
            case = db.session.get(MissingPerson, story.missing_person_id)
        if case is None:
            raise StorageError(f"Case {story.missing_person_id} does not exist")
        case.status = "found"
        case.updated_at = found_at
        db.session.add(case)
        db.session.add(story)
        self._commit("add_success_story")
        return story

    def count_cases(self, status: Optional[str] = None, created_since: Optional[datetime] = None) -> int:
        stmt = select(func.count(MissingPerson.id))
        if status is not None:
            stmt = stmt.where(MissingPerson.status == status)
        if created_since is not None:
            stmt = stmt.where(MissingPerson.created_at >= created_since)
        with self._reading("count_cases"):
            return int(db.session.execute(stmt).scalar() or 0)

    def ping(self) -> int:
        with self._reading("ping", "Database unreachable"):
            return int(db.session.execute(text("SELECT 1 + 1 AS result")).scalar())
