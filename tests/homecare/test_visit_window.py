from datetime import date

from src.homecare.services.assessments.visit_window import MISSING_FIELDS_MESSAGE, validate_visit_date

TODAY = date(2026, 5, 20)


def test_valid_visit_window_passes():
    assert validate_visit_date(date(2026, 5, 19), "09:00", "10:30") == []


def test_missing_fields_report_single_message():
    assert validate_visit_date(None, "09:00", "10:00") == [MISSING_FIELDS_MESSAGE]
    assert validate_visit_date(TODAY, "", "10:00") == [MISSING_FIELDS_MESSAGE]
    assert validate_visit_date(TODAY, "09:00", None) == [MISSING_FIELDS_MESSAGE]


def test_overnight_visits_cross_midnight():
    assert validate_visit_date(date(2024, 1, 1), "22:00", "01:30") == []


def test_times_with_seconds_are_accepted():
    assert validate_visit_date(TODAY, "09:00:00", "10:00:00") == []


def test_visit_dates_are_not_bounded_by_today():
    assert validate_visit_date(date(2026, 6, 1), "09:00", "10:00") == []


def test_unparseable_times_are_reported():
    problems = validate_visit_date(TODAY, "9am", "25:00")
    assert problems == [
        "Arrival time '9am' is not a valid HH:MM time",
        "Departure time '25:00' is not a valid HH:MM time",
    ]
