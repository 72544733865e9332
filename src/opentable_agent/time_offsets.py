"""Conversion of the platform's minute offsets into wall-clock times."""

from __future__ import annotations

MINUTES_PER_DAY = 24 * 60


def offset_to_time(base_time: str, offset_minutes: int) -> str:
    """
    Shift ``base_time`` (``HH:MM``) by ``offset_minutes`` and return ``HH:MM``.

    Results wrap around midnight in both directions, so ``23:30`` plus 90
    minutes is ``01:00`` and ``00:00`` minus 30 minutes is ``23:30``.
    """
    hours, minutes = (int(part) for part in base_time.split(":"))
    total = hours * 60 + minutes + int(offset_minutes)
    wrapped = ((total % MINUTES_PER_DAY) + MINUTES_PER_DAY) % MINUTES_PER_DAY
    return f"{wrapped // 60:02d}:{wrapped % 60:02d}"
