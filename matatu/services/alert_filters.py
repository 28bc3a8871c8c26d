"""
Composable predicates for driver-alert queries.

A filter is a list of ``(column, operator, value)`` triples joined with AND.
Supplying ``None`` (or an empty string) for a value adds nothing, so an
absent query parameter means "no constraint". The same triples can be
rendered to SQLAlchemy clauses or evaluated against an alert in memory.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query

from matatu.core.errors import ValidationError
from matatu.models.alert import DriverAlert

EQ = "eq"
CONTAINS = "ilike_contains"
ACTIVE_AT = "active_at"
EXPIRED_AT = "expired_at"

# public filter name -> mapped attribute
COLUMNS: Dict[str, Any] = {
    "alert_type": DriverAlert.alert_type,
    "severity_level": DriverAlert.severity_level,
    "location_name": DriverAlert.location_name,
    "driver_id": DriverAlert.driver_id,
    "expiry_time": DriverAlert.expiry_time,
    "created_at": DriverAlert.created_at,
}


@dataclass(frozen=True)
class Predicate:
    column: str
    op: str
    value: Any


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _raw(value: Any) -> Any:
    return getattr(value, "value", value)


def _sql_eq(col, value):
    return col == value


def _sql_contains(col, value):
    return col.ilike(f"%{_escape_like(value)}%", escape="\\")


def _sql_active(col, now):
    return or_(col.is_(None), col > now)


def _sql_expired(col, now):
    return and_(col.is_not(None), col <= now)


def _mem_eq(actual, value):
    return actual is not None and str(_raw(actual)) == str(_raw(value))


def _mem_contains(actual, value):
    return actual is not None and value.lower() in actual.lower()


def _mem_active(actual, now):
    return actual is None or actual > now


def _mem_expired(actual, now):
    return actual is not None and actual <= now


_OPS: Dict[str, Tuple[Callable, Callable]] = {
    EQ: (_sql_eq, _mem_eq),
    CONTAINS: (_sql_contains, _mem_contains),
    ACTIVE_AT: (_sql_active, _mem_active),
    EXPIRED_AT: (_sql_expired, _mem_expired),
}


class AlertFilter:
    def __init__(self) -> None:
        self._predicates: List[Predicate] = []

    def _add(self, column: str, op: str, value: Any) -> "AlertFilter":
        if column not in COLUMNS:
            raise KeyError(f"unknown alert column: {column}")
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return self
        self._predicates.append(Predicate(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "AlertFilter":
        return self._add(column, EQ, _raw(value))

    def contains(self, column: str, text: Optional[str]) -> "AlertFilter":
        return self._add(column, CONTAINS, text.strip() if text else text)

    def active_at(self, now: datetime) -> "AlertFilter":
        return self._add("expiry_time", ACTIVE_AT, now)

    def expired_at(self, now: datetime) -> "AlertFilter":
        return self._add("expiry_time", EXPIRED_AT, now)

    @property
    def predicates(self) -> Tuple[Predicate, ...]:
        return tuple(self._predicates)

    def clauses(self) -> list:
        return [_OPS[p.op][0](COLUMNS[p.column], p.value) for p in self._predicates]

    def apply(self, query: Query) -> Query:
        clauses = self.clauses()
        return query.filter(*clauses) if clauses else query

    def matches(self, alert: DriverAlert) -> bool:
        return all(_OPS[p.op][1](getattr(alert, p.column), p.value) for p in self._predicates)

    @classmethod
    def for_listing(
        cls,
        *,
        alert_type: Optional[str] = None,
        severity_level: Optional[str] = None,
        location: Optional[str] = None,
        poster_id: Optional[int] = None,
        active_only: bool = True,
        now: Optional[datetime] = None,
    ) -> "AlertFilter":
        flt = (
            cls()
            .eq("alert_type", alert_type)
            .eq("severity_level", severity_level)
            .contains("location_name", location)
            .eq("driver_id", poster_id)
        )
        if active_only:
            if now is None:
                raise ValidationError("active_only filtering needs a reference time")
            flt.active_at(now)
        return flt
