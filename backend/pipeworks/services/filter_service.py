# Overview: Pure filter predicates for orders, staff, items and attendance records.

"""
Filter Predicate Evaluator

A filter is a sparse set of optional constraints. A record matches when
every *present* constraint holds; absent (None), empty-list and empty-string
constraints impose no restriction. Predicates only read attributes and
never raise, so applying the same filter twice is a no-op and adding a
constraint can only shrink the result.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from pipeworks.time_utils import parse_iso_date
from pipeworks.validation import ValidationError

T = TypeVar("T")


# =============================================================================
# PRIMITIVE CHECKS
# =============================================================================

def _in_set(allowed: Sequence[Any] | None, value: Any) -> bool:
    if not allowed:
        return True
    return value in allowed


def _contains(term: str | None, *targets: Any) -> bool:
    """Case-insensitive substring match against ANY target field."""
    if not term:
        return True
    needle = term.lower()
    for target in targets:
        if isinstance(target, str) and needle in target.lower():
            return True
    return False


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _in_range(value: Any, low: Any = None, high: Any = None) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    try:
        if low is not None and value < low:
            return False
        if high is not None and value > high:
            return False
    except TypeError:
        return False
    return True


def _in_date_range(value: Any, start: date | None, end: date | None) -> bool:
    if start is None and end is None:
        return True
    return _in_range(_as_date(value), start, end)


def _equals(expected: Any, value: Any) -> bool:
    if expected is None or expected == "":
        return True
    return value == expected


# =============================================================================
# FILTER SPECS
# =============================================================================

@dataclass(frozen=True)
class OrderFilters:
    status: tuple[str, ...] = ()
    priority: tuple[str, ...] = ()
    payment_status: tuple[str, ...] = ()
    customer: str | None = None
    order_number: str | None = None
    search_term: str | None = None
    assigned_to: str | None = None
    tags: tuple[str, ...] = ()
    min_amount_cents: int | None = None
    max_amount_cents: int | None = None
    date_from: date | None = None
    date_to: date | None = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "OrderFilters":
        return cls(
            status=_list_arg(args, "status"),
            priority=_list_arg(args, "priority"),
            payment_status=_list_arg(args, "payment_status"),
            customer=_text_arg(args, "customer"),
            order_number=_text_arg(args, "order_number"),
            search_term=_text_arg(args, "search"),
            assigned_to=_text_arg(args, "assigned_to"),
            tags=_list_arg(args, "tags"),
            min_amount_cents=_int_arg(args, "min_amount_cents"),
            max_amount_cents=_int_arg(args, "max_amount_cents"),
            date_from=_date_arg(args, "date_from"),
            date_to=_date_arg(args, "date_to"),
        )


@dataclass(frozen=True)
class StaffFilters:
    role: tuple[str, ...] = ()
    department: tuple[str, ...] = ()
    status: tuple[str, ...] = ()
    manager_id: int | None = None
    search_term: str | None = None
    hired_after: date | None = None
    hired_before: date | None = None
    salary_min_cents: int | None = None
    salary_max_cents: int | None = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "StaffFilters":
        return cls(
            role=_list_arg(args, "role"),
            department=_list_arg(args, "department"),
            status=_list_arg(args, "status"),
            manager_id=_int_arg(args, "manager_id"),
            search_term=_text_arg(args, "search"),
            hired_after=_date_arg(args, "hired_after"),
            hired_before=_date_arg(args, "hired_before"),
            salary_min_cents=_int_arg(args, "salary_min_cents"),
            salary_max_cents=_int_arg(args, "salary_max_cents"),
        )


@dataclass(frozen=True)
class ItemFilters:
    category: tuple[str, ...] = ()
    status: tuple[str, ...] = ()
    search_term: str | None = None
    min_price_cents: int | None = None
    max_price_cents: int | None = None
    low_stock_only: bool = False

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "ItemFilters":
        return cls(
            category=_list_arg(args, "category"),
            status=_list_arg(args, "status"),
            search_term=_text_arg(args, "search"),
            min_price_cents=_int_arg(args, "min_price_cents"),
            max_price_cents=_int_arg(args, "max_price_cents"),
            low_stock_only=(_text_arg(args, "low_stock") or "").lower() == "true",
        )


@dataclass(frozen=True)
class AttendanceFilters:
    staff_ids: tuple[int, ...] = ()
    date_from: date | None = None
    date_to: date | None = None
    status: tuple[str, ...] = ()
    department: tuple[str, ...] = ()

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "AttendanceFilters":
        raw_ids = _list_arg(args, "staff_id")
        try:
            staff_ids = tuple(int(v) for v in raw_ids)
        except ValueError:
            raise ValidationError("staff_id must be an integer")
        return cls(
            staff_ids=staff_ids,
            date_from=_date_arg(args, "date_from"),
            date_to=_date_arg(args, "date_to"),
            status=_list_arg(args, "status"),
            department=_list_arg(args, "department"),
        )


def merge(base: T, **overrides: Any) -> T:
    """Return a copy of a filter set with extra constraints applied."""
    valid = {f.name for f in fields(base)}
    unknown = set(overrides) - valid
    if unknown:
        raise ValidationError(f"Unknown filter: {', '.join(sorted(unknown))}")
    return replace(base, **overrides)


# =============================================================================
# PREDICATES
# =============================================================================

def matches_order(filters: OrderFilters, order: Any) -> bool:
    if not _in_set(filters.status, order.status):
        return False
    if not _in_set(filters.priority, order.priority):
        return False
    if not _in_set(filters.payment_status, order.payment_status):
        return False
    if not _contains(filters.customer, order.customer_name, order.customer_company):
        return False
    if not _contains(filters.order_number, order.order_number):
        return False
    if not _contains(filters.search_term, order.order_number, order.customer_name, order.customer_company):
        return False
    if not _equals(filters.assigned_to, order.assigned_to):
        return False
    if filters.tags and not set(filters.tags) & set(order.tags or ()):
        return False
    if not _in_range(order.total_amount_cents, filters.min_amount_cents, filters.max_amount_cents):
        return False
    if not _in_date_range(order.created_at, filters.date_from, filters.date_to):
        return False
    return True


def matches_staff(filters: StaffFilters, member: Any) -> bool:
    if not _in_set(filters.role, member.role):
        return False
    if not _in_set(filters.department, member.department):
        return False
    if not _in_set(filters.status, member.status):
        return False
    if not _equals(filters.manager_id, member.manager_id):
        return False
    if not _contains(
        filters.search_term,
        member.first_name,
        member.last_name,
        member.email,
        member.employee_id,
        member.job_title,
    ):
        return False
    if not _in_date_range(member.hire_date, filters.hired_after, filters.hired_before):
        return False
    if not _in_range(member.salary_cents, filters.salary_min_cents, filters.salary_max_cents):
        return False
    return True


def matches_item(filters: ItemFilters, item: Any) -> bool:
    if not _in_set(filters.category, item.category):
        return False
    if not _in_set(filters.status, item.status):
        return False
    if not _contains(filters.search_term, item.name, item.description, item.material):
        return False
    if not _in_range(item.price_cents, filters.min_price_cents, filters.max_price_cents):
        return False
    if filters.low_stock_only and not item.is_low_stock:
        return False
    return True


def matches_attendance(
    filters: AttendanceFilters,
    record: Any,
    staff_by_id: Mapping[int, Any] | None = None,
) -> bool:
    if not _in_set(filters.staff_ids, record.staff_id):
        return False
    if not _in_date_range(record.date, filters.date_from, filters.date_to):
        return False
    if not _in_set(filters.status, record.status):
        return False
    if filters.department:
        member = (staff_by_id or {}).get(record.staff_id)
        if member is None or member.department not in filters.department:
            return False
    return True


def _apply(predicate: Callable[[Any], bool], records: Iterable[T]) -> list[T]:
    return [r for r in records if predicate(r)]


def apply_order_filters(filters: OrderFilters, orders: Iterable[T]) -> list[T]:
    return _apply(lambda o: matches_order(filters, o), orders)


def apply_staff_filters(filters: StaffFilters, staff: Iterable[T]) -> list[T]:
    return _apply(lambda s: matches_staff(filters, s), staff)


def apply_item_filters(filters: ItemFilters, items: Iterable[T]) -> list[T]:
    return _apply(lambda i: matches_item(filters, i), items)


def apply_attendance_filters(
    filters: AttendanceFilters,
    records: Iterable[T],
    staff_by_id: Mapping[int, Any] | None = None,
) -> list[T]:
    return _apply(lambda r: matches_attendance(filters, r, staff_by_id), records)


# =============================================================================
# QUERY-ARG PARSING
# =============================================================================

def _list_arg(args: Mapping[str, Any], name: str) -> tuple[str, ...]:
    """Accept ?status=a&status=b as well as ?status=a,b."""
    if hasattr(args, "getlist"):
        raw = args.getlist(name)
    else:
        value = args.get(name)
        if value is None:
            raw = []
        elif isinstance(value, (list, tuple)):
            raw = list(value)
        else:
            raw = [value]
    values: list[str] = []
    for chunk in raw:
        for part in str(chunk).split(","):
            part = part.strip()
            if part and part not in values:
                values.append(part)
    return tuple(values)


def _text_arg(args: Mapping[str, Any], name: str) -> str | None:
    value = args.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _int_arg(args: Mapping[str, Any], name: str) -> int | None:
    value = _text_arg(args, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def _date_arg(args: Mapping[str, Any], name: str) -> date | None:
    value = _text_arg(args, name)
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 date")
