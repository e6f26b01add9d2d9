"""Форматирование времени и группировка версий по дням.

Все даты в приложении хранятся в UTC без tzinfo; aware-значения приводятся к UTC.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, TypeVar, Union

DateLike = Union[str, datetime]
T = TypeVar("T")


def utcnow() -> datetime:
    """Текущее время UTC (naive)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_datetime(value: DateLike) -> datetime:
    """Приведение ISO-строки или datetime к naive UTC"""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    """Относительное время: "Just now", "3 minutes ago", "2 hours ago" ..."""
    target = to_datetime(value)
    now = to_datetime(now) if now else utcnow()
    seconds = (now - target).total_seconds()

    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    return format_absolute_time(target)


def format_absolute_time(value: DateLike) -> str:
    """Абсолютное время: "Jan 15, 2024 3:45 PM" """
    target = to_datetime(value)
    hour = target.hour % 12 or 12
    meridiem = "AM" if target.hour < 12 else "PM"
    return f"{target:%b} {target.day}, {target.year} {hour}:{target:%M} {meridiem}"


def is_today(value: DateLike, now: Optional[datetime] = None) -> bool:
    now = to_datetime(now) if now else utcnow()
    return to_datetime(value).date() == now.date()


def is_yesterday(value: DateLike, now: Optional[datetime] = None) -> bool:
    now = to_datetime(now) if now else utcnow()
    return to_datetime(value).date() == (now - timedelta(days=1)).date()


def day_label(value: DateLike, now: Optional[datetime] = None) -> str:
    """Заголовок группы: "Today", "Yesterday" или "January 15, 2024" """
    target = to_datetime(value)
    if is_today(target, now):
        return "Today"
    if is_yesterday(target, now):
        return "Yesterday"
    return f"{target:%B} {target.day}, {target.year}"


def group_versions_by_day(versions: Iterable[T], now: Optional[datetime] = None) -> Dict[str, List[T]]:
    """Группировка версий по календарным дням с сохранением порядка"""
    groups: Dict[str, List[T]] = {}
    for version in versions:
        groups.setdefault(day_label(version.created_at, now), []).append(version)
    return groups
