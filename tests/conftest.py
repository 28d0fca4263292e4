# tests/conftest.py

import pytest

from ccrm.core.entities import Course, Instructor, Student
from ccrm.core.enums import Semester
from ccrm.services import CourseService, EnrollmentService, ReportService, StudentService


@pytest.fixture
def sample_student():
    return Student("S1", "2023001", "Ankit Choudhary", "ankit.choudhary@student.edu")


@pytest.fixture
def sample_instructor():
    return Instructor("I001", "Dr. Sumit", "sumit@uni.edu", "Computer Science")


@pytest.fixture
def sample_course(sample_instructor):
    return Course.build("C1", "Introduction to Programming", 3,
                        semester=Semester.FALL, department="Computer Science",
                        instructor=sample_instructor)


@pytest.fixture
def four_credit_course():
    return Course.build("C2", "Calculus I", 4, department="Mathematics")


@pytest.fixture
def three_credit_course():
    return Course.build("C4", "Linear Algebra", 3, department="Mathematics")


@pytest.fixture
def heavy_course():
    return Course.build("C3", "Capstone Project", 20, department="Computer Science")


@pytest.fixture
def student_service(sample_student):
    service = StudentService()
    service.add_student(sample_student)
    service.add_student(Student("S2", "2023002", "Sarvagya Joshi", "sarvagya.joshi@student.edu"))
    return service


@pytest.fixture
def course_service(sample_course, four_credit_course, three_credit_course, heavy_course):
    service = CourseService()
    for course in (sample_course, four_credit_course, three_credit_course, heavy_course):
        service.add_course(course)
    return service


@pytest.fixture
def enrollment_service(student_service, course_service):
    return EnrollmentService(student_service, course_service, max_credits_per_semester=24)


@pytest.fixture
def report_service(student_service):
    return ReportService(student_service)
