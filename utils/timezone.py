"""Утилиты для работы со временем (в БД храним UTC без tzinfo)"""
from datetime import datetime, timezone
from typing import Optional


def get_utc_now() -> datetime:
    """Получить текущее время в UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_aware_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetime из БД считаем UTC и добавляем tzinfo для сериализации"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_timestamp(ts: float) -> datetime:
    """Время модификации файла (epoch) как naive UTC"""
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)
