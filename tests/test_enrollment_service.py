# tests/test_enrollment_service.py

import logging
import threading

import pytest

from ccrm.core.enums import Semester
from ccrm.core.exceptions import (
    CreditLimitExceededError,
    DuplicateEnrollmentError,
    EnrollmentError,
    ResourceNotFoundError,
)
from ccrm.core.entities import Student
from ccrm.services import EnrollmentService


def _codes(enrollments):
    return [e.course.code.code for e in enrollments]


def test_enroll_student(enrollment_service, sample_student):
    enrollment = enrollment_service.enroll_student("S1", "c1", Semester.FALL, 2024)

    assert enrollment.course.code.code == "C1"
    assert enrollment.semester == Semester.FALL
    assert enrollment.year == 2024
    assert sample_student.get_enrollment("C1") is enrollment
    assert enrollment_service.get_enrollment(enrollment.id) is enrollment


def test_credit_cap_rejects_enrollment_and_changes_nothing(enrollment_service, sample_student):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)

    with pytest.raises(CreditLimitExceededError) as exc_info:
        enrollment_service.enroll_student("S1", "C3", Semester.FALL, 2024)

    assert exc_info.value.error_code == "CREDIT_LIMIT_EXCEEDED"
    assert exc_info.value.details['current_credits'] == 7
    assert exc_info.value.details['course_credits'] == 20
    assert isinstance(exc_info.value, EnrollmentError)
    assert set(sample_student.enrollments) == {"C1", "C2"}
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 7


def test_credit_cap_allows_exactly_the_limit(student_service, course_service):
    service = EnrollmentService(student_service, course_service, max_credits_per_semester=23)
    service.enroll_student("S1", "C1", Semester.FALL, 2024)
    service.enroll_student("S1", "C3", Semester.FALL, 2024)

    assert service.get_semester_credits("S1", Semester.FALL, 2024) == 23


def test_credit_cap_is_per_semester_and_year(enrollment_service):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C3", Semester.SPRING, 2025)

    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 7
    assert enrollment_service.get_semester_credits("S1", Semester.SPRING, 2025) == 20
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2025) == 0


def test_credit_cap_is_per_student(enrollment_service):
    enrollment_service.enroll_student("S1", "C3", Semester.FALL, 2024)
    enrollment_service.enroll_student("S2", "C3", Semester.FALL, 2024)

    assert enrollment_service.get_semester_credits("S2", Semester.FALL, 2024) == 20


def test_duplicate_enrollment_is_rejected_across_semesters(enrollment_service, sample_student):
    first = enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)

    with pytest.raises(DuplicateEnrollmentError) as exc_info:
        enrollment_service.enroll_student("S1", "C1", Semester.SPRING, 2025)

    assert exc_info.value.error_code == "DUPLICATE_ENROLLMENT"
    assert sample_student.get_enrollment("C1") is first
    assert enrollment_service.list_enrollments() == [first]
    assert enrollment_service.get_semester_credits("S1", Semester.SPRING, 2025) == 0


@pytest.mark.parametrize("student_id, course_code", [("NOPE", "C1"), ("S1", "NOPE")])
def test_enroll_unknown_student_or_course(enrollment_service, student_id, course_code):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        enrollment_service.enroll_student(student_id, course_code, Semester.FALL, 2024)

    assert exc_info.value.message == "Student or course not found"
    assert enrollment_service.list_enrollments() == []


def test_record_grade(enrollment_service, sample_student):
    enrollment = enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.record_grade("S1", "c1", 81)

    assert enrollment.marks == 81
    assert enrollment.grade.name == "A"


def test_record_grade_for_unknown_student_or_course_is_ignored(enrollment_service, sample_student):
    enrollment = enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)

    enrollment_service.record_grade("NOPE", "C1", 81)
    enrollment_service.record_grade("S1", "C2", 81)

    assert enrollment.marks is None
    assert "C2" not in sample_student.enrollments


def test_unenroll_student_frees_credits(enrollment_service):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)

    assert enrollment_service.unenroll_student("S1", "C2") is True
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 3

    enrollment_service.enroll_student("S1", "C3", Semester.FALL, 2024)
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 23


def test_unenroll_unknown_enrollment(enrollment_service):
    assert enrollment_service.unenroll_student("S1", "C1") is False
    assert enrollment_service.unenroll_student("NOPE", "C1") is False


def test_re_enroll_after_unenroll(enrollment_service):
    first = enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.unenroll_student("S1", "C1")
    second = enrollment_service.enroll_student("S1", "C1", Semester.SPRING, 2025)

    assert second is not first
    assert enrollment_service.get_enrollment(first.id) is None
    assert enrollment_service.get_student_enrollments("S1") == [second]


def test_direct_student_unenroll_is_not_counted(enrollment_service, sample_student):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)

    sample_student.unenroll("C2")

    assert _codes(enrollment_service.get_student_enrollments("S1")) == ["C1"]
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 3
    assert enrollment_service.get_statistics()['total_enrollments'] == 1

    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 7


def test_get_student_enrollments_keeps_creation_order(enrollment_service):
    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)
    enrollment_service.enroll_student("S2", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C4", Semester.SPRING, 2025)
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)

    assert _codes(enrollment_service.get_student_enrollments("S1")) == ["C2", "C4", "C1"]
    assert _codes(enrollment_service.get_student_enrollments("S2")) == ["C1"]
    assert enrollment_service.get_student_enrollments("NOPE") == []


def test_get_statistics(enrollment_service):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)
    enrollment_service.enroll_student("S2", "C1", Semester.FALL, 2024)
    enrollment_service.record_grade("S1", "C1", 65)

    assert enrollment_service.get_statistics() == {
        'total_enrollments': 3,
        'graded_enrollments': 1,
        'ungraded_enrollments': 2,
        'max_credits_per_semester': 24,
    }


def test_concurrent_enrollments_respect_credit_cap(student_service, course_service):
    service = EnrollmentService(student_service, course_service, max_credits_per_semester=23)
    errors = []

    def enroll(code):
        try:
            service.enroll_student("S1", code, Semester.FALL, 2024)
        except CreditLimitExceededError as e:
            errors.append(e)

    threads = [threading.Thread(target=enroll, args=(code,)) for code in ("C1", "C2", "C3", "C4")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert service.get_semester_credits("S1", Semester.FALL, 2024) <= 23
    assert errors


def test_replaced_student_starts_without_enrollments(enrollment_service, student_service):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    student_service.add_student(Student("S1", "2023001", "Ankit Choudhary", "ankit@uni.edu"))

    assert enrollment_service.get_student_enrollments("S1") == []
    assert enrollment_service.get_semester_credits("S1", Semester.FALL, 2024) == 0
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    assert len(enrollment_service.list_enrollments()) == 1


def test_stale_records_are_evicted(enrollment_service, student_service, sample_student):
    orphan = enrollment_service.enroll_student("S1", "C2", Semester.FALL, 2024)
    sample_student.unenroll("C2")
    replaced = enrollment_service.enroll_student("S2", "C1", Semester.FALL, 2024)
    student_service.add_student(Student("S2", "2023002", "Sarvagya Joshi", "sarvagya@uni.edu"))

    assert enrollment_service.get_enrollment(orphan.id) is None
    assert enrollment_service.get_enrollment(replaced.id) is None

    current = enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)

    assert list(enrollment_service._enrollments) == [current.id]
    assert list(enrollment_service._semester_index) == [("S1", Semester.FALL, 2024)]


def test_repeated_replacement_does_not_grow_the_arena(enrollment_service, student_service):
    for _ in range(3):
        student_service.add_student(Student("S1", "2023001", "Ankit Choudhary", "ankit@uni.edu"))
        enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)

    assert len(enrollment_service._enrollments) == 1
    assert len(enrollment_service.list_enrollments()) == 1


def test_record_grade_logs_only_recorded_marks(enrollment_service, caplog):
    enrollment_service.enroll_student("S1", "C1", Semester.FALL, 2024)
    logger = logging.getLogger("ccrm")
    logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.DEBUG, logger="ccrm"):
            enrollment_service.record_grade("S1", "C2", 81)
            enrollment_service.record_grade("S1", "C1", 81)
    finally:
        logger.removeHandler(caplog.handler)

    recorded = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Recorded marks")]
    assert set(recorded) == {"Recorded marks 81 for S1 in C1"}
    assert any("not enrolled in C2" in r.getMessage() for r in caplog.records)
