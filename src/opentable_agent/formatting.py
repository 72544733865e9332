"""Rendering of availability reports for the terminal."""

from __future__ import annotations

from .models import AvailabilityReport


def format_table(report: AvailabilityReport) -> str:
    """Build a tab-separated time/type table."""
    if not report.slots:
        return f"No available slots for {report.date}."

    lines: list[str] = [
        f"Availability for {report.date}:",
        "Time   \tType",
        "-------\t----------",
    ]
    lines.extend(f"{slot.time}\t{slot.type}" for slot in report.slots)
    lines.append(f"({len(report.slots)} slot(s))")
    return "\n".join(lines)


def format_json(report: AvailabilityReport) -> str:
    return report.model_dump_json(indent=2)


def render(report: AvailabilityReport, *, as_json: bool = False) -> str:
    return format_json(report) if as_json else format_table(report)
