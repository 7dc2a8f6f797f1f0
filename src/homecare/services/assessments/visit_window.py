from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Optional

MISSING_FIELDS_MESSAGE = "Ensure visit date, arrival and departure time are provided"

# Browser time inputs send seconds when a step below one minute is set.
_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def _parse_time(value: str) -> Optional[time]:
    for time_format in _TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), time_format).time()
        except ValueError:
            continue
    return None


def validate_visit_date(
    visit_date: Optional[date],
    time_in: Optional[str],
    time_out: Optional[str],
) -> List[str]:
    """Check the visit window of an assessment before it goes to QA.

    Returns the problems found; an empty list means the visit may be sent.
    A departure earlier than the arrival is an overnight visit, not an error.
    """

    if visit_date is None or not time_in or not time_out:
        return [MISSING_FIELDS_MESSAGE]

    problems: List[str] = []
    if _parse_time(time_in) is None:
        problems.append(f"Arrival time '{time_in}' is not a valid HH:MM time")
    if _parse_time(time_out) is None:
        problems.append(f"Departure time '{time_out}' is not a valid HH:MM time")
    return problems
