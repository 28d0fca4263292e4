# tests/test_report_service.py

import pytest

from ccrm.core.enums import Semester
from ccrm.services import ReportService, StudentService
from ccrm.services.report_service import gpa_band


@pytest.mark.parametrize(
    "gpa, band",
    [
        (10.0, "A (9.0+)"),
        (9.0, "A (9.0+)"),
        (8.99, "B (8.0-8.9)"),
        (7.0, "C (7.0-7.9)"),
        (6.5, "D (6.0-6.9)"),
        (5.99, "F (<6.0)"),
        (0.0, "F (<6.0)"),
    ],
)
def test_gpa_band(gpa, band):
    assert gpa_band(gpa) == band


def test_empty_catalog_report():
    service = ReportService(StudentService())

    assert service.gpa_distribution() == {}
    assert service.top_student() is None
    assert service.render() == "No students available for reports."


def test_distribution_and_top_student(enrollment_service, report_service):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S2", "C1", Semester.FALL, 2024)
    enrollment_service.record_grade("S1", "C1", 93)
    enrollment_service.record_grade("S2", "C1", 72)

    assert report_service.gpa_distribution() == {"A (9.0+)": 1, "B (8.0-8.9)": 1}
    assert report_service.top_student().id == "S1"


def test_ungraded_students_fall_in_lowest_band(report_service):
    assert report_service.gpa_distribution() == {"F (<6.0)": 2}


def test_render(enrollment_service, report_service):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.record_grade("S1", "C1", 85)

    assert report_service.render() == (
        "--- GPA Distribution Report ---\n"
        "A (9.0+): 1 students\n"
        "F (<6.0): 1 students\n"
        "\n"
        "Top Student: Ankit Choudhary (GPA: 9.00)"
    )
