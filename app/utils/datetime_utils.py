"""UTC 날짜/시간 유틸리티.

UTC datetime helpers shared by services.
SQLite returns naive datetimes even for ``DateTime(timezone=True)`` columns,
so every comparison goes through ``ensure_utc``.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """현재 UTC 시각 — Current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """naive datetime을 UTC로 간주하고, aware datetime은 UTC로 변환합니다.

    Treat naive datetimes as UTC and convert aware ones to UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
