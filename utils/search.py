"""Search criteria for missing-person cases and the conditions they compile to.

A :class:`SearchCriteria` is the typed result of boundary validation. It is
compiled once into a list of :class:`Condition` objects which every storage
backend understands: the relational backend renders them as SQLAlchemy
clauses, the in-memory backend evaluates them record by record. Keeping the
matching rules here means both backends agree on what a search returns.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, List, Optional

from sqlalchemy import and_

CONTAINS = "contains"
EQUALS = "equals"
WITHIN = "within"


@dataclass(frozen=True)
class SearchCriteria:
    name: Optional[str] = None
    location: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    status: Optional[str] = None
    last_seen_date: Optional[date] = None


@dataclass(frozen=True)
class Condition:
    field: str
    operator: str
    value: Any

    def matches(self, record) -> bool:
        actual = getattr(record, self.field)
        if actual is None:
            return False
        if self.operator == CONTAINS:
            return self.value.lower() in str(actual).lower()
        if self.operator == EQUALS:
            return actual == self.value
        if self.operator == WITHIN:
            start, end = self.value
            return start <= actual < end
        raise ValueError(f"Unknown operator {self.operator!r}")

    def to_clause(self, model):
        column = getattr(model, self.field)
        if self.operator == CONTAINS:
            return column.ilike(f"%{escape_like(self.value)}%", escape="\\")
        if self.operator == EQUALS:
            return column == self.value
        if self.operator == WITHIN:
            start, end = self.value
            return and_(column >= start, column < end)
        raise ValueError(f"Unknown operator {self.operator!r}")


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open ``[day 00:00, day+1 00:00)`` interval for a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def build_conditions(criteria: SearchCriteria) -> List[Condition]:
    """Compile criteria into conjunctive conditions; unset fields add nothing."""
    conditions: List[Condition] = []
    if criteria.name:
        conditions.append(Condition("name", CONTAINS, criteria.name))
    if criteria.location:
        conditions.append(Condition("last_location", CONTAINS, criteria.location))
    if criteria.age is not None:
        conditions.append(Condition("age", EQUALS, criteria.age))
    if criteria.gender:
        conditions.append(Condition("gender", EQUALS, criteria.gender))
    if criteria.status:
        conditions.append(Condition("status", EQUALS, criteria.status))
    if criteria.last_seen_date is not None:
        conditions.append(Condition("last_seen_date", WITHIN, day_bounds(criteria.last_seen_date)))
    return conditions
