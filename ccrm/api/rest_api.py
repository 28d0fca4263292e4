"""
REST API implementation for the CCRM platform using FastAPI.
"""

import threading
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from pydantic import BaseModel, Field

from fastapi import FastAPI, HTTPException, status

from ..core.entities import Student, Instructor, Course, Enrollment
from ..core.enums import Semester
from ..core.exceptions import (
    CCRMException, ValidationError, ResourceNotFoundError,
    DuplicateEnrollmentError, CreditLimitExceededError,
)
from ..services import (
    StudentService, InstructorService, CourseService, EnrollmentService, ReportService,
)
from ..persistence import FileService


# Pydantic models for API
class StudentCreate(BaseModel):
    student_id: str = Field(..., min_length=1, max_length=20)
    reg_no: str = Field(..., min_length=1, max_length=20)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r'^[^@]+@[^@]+\.[^@]+$')


class StudentUpdate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r'^[^@]+@[^@]+\.[^@]+$')


class StudentResponse(BaseModel):
    student_id: str
    reg_no: str
    full_name: str
    email: str
    active: bool
    gpa: float
    enrollments: List[str] = []
    profile: str
    created_at: datetime
    updated_at: datetime
    version: int


class InstructorCreate(BaseModel):
    instructor_id: str = Field(..., min_length=1, max_length=20)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r'^[^@]+@[^@]+\.[^@]+$')
    department: str = Field(..., min_length=1, max_length=100)


class InstructorResponse(BaseModel):
    instructor_id: str
    full_name: str
    email: str
    department: str
    active: bool
    profile: str


class CourseCreate(BaseModel):
    course_code: str = Field(..., min_length=1, max_length=20)
    title: str = Field(..., min_length=1, max_length=200)
    credits: int = Field(..., ge=1)
    department: str = Field("", max_length=100)
    semester: Semester = Semester.FALL
    instructor_id: Optional[str] = None


class CourseUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    credits: int = Field(..., ge=1)
    department: str = Field(..., max_length=100)


class CourseResponse(BaseModel):
    course_code: str
    title: str
    credits: int
    department: str
    semester: Semester
    instructor_id: Optional[str] = None
    active: bool


class EnrollmentCreate(BaseModel):
    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    semester: Semester
    year: int


class EnrollmentResponse(BaseModel):
    enrollment_id: str
    student_id: str
    course_code: str
    title: str
    semester: Semester
    year: int
    marks: Optional[float] = None
    grade: Optional[str] = None
    grade_points: Optional[float] = None
    created_at: datetime


class GradeRecord(BaseModel):
    student_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    # Not range checked; see Grade.from_marks.
    marks: float


class TranscriptResponse(BaseModel):
    student_id: str
    gpa: float
    transcript: str


class ReportResponse(BaseModel):
    distribution: Dict[str, int]
    top_student_id: Optional[str] = None
    top_student_gpa: Optional[float] = None


class DataOperationResponse(BaseModel):
    success: bool
    message: str
    details: Dict[str, Any] = {}


def _to_http_exception(error: CCRMException) -> HTTPException:
    """Map a domain error onto an HTTP error."""
    if isinstance(error, ResourceNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, DuplicateEnrollmentError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, (CreditLimitExceededError, ValidationError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail={'error': error.error_code, 'message': error.message})


class CCRMRestAPI:
    """REST API implementation for the CCRM platform."""

    def __init__(self, student_service: StudentService, instructor_service: InstructorService,
                 course_service: CourseService, enrollment_service: EnrollmentService,
                 report_service: ReportService, file_service: FileService):
        self._student_service = student_service
        self._instructor_service = instructor_service
        self._course_service = course_service
        self._enrollment_service = enrollment_service
        self._report_service = report_service
        self._file_service = file_service

        self._lock = threading.RLock()

        self.app = FastAPI(
            title="Campus Course & Records Manager API",
            description="Students, courses, enrollments and grades",
            version="1.0.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        # Student endpoints
        @self.app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        async def create_student(student_data: StudentCreate):
            """Create a new student."""
            with self._lock:
                student = Student(
                    student_data.student_id,
                    student_data.reg_no,
                    student_data.full_name,
                    student_data.email,
                )
                self._student_service.add_student(student)
                return self._student_to_response(student)

        @self.app.get("/students", response_model=List[StudentResponse])
        async def list_students(skip: int = 0, limit: int = 100):
            """List all students."""
            with self._lock:
                students = self._student_service.list_students()[skip:skip + limit]
                return [self._student_to_response(s) for s in students]

        @self.app.get("/students/search", response_model=List[StudentResponse])
        async def search_students(q: str):
            """Search students by name, registration number or email."""
            with self._lock:
                return [self._student_to_response(s) for s in self._student_service.search(q)]

        @self.app.get("/students/{student_id}", response_model=StudentResponse)
        async def get_student(student_id: str):
            """Get a student by student ID."""
            with self._lock:
                return self._student_to_response(self._require_student(student_id))

        @self.app.put("/students/{student_id}", response_model=StudentResponse)
        async def update_student(student_id: str, student_data: StudentUpdate):
            """Update a student's name and email."""
            with self._lock:
                student = self._require_student(student_id)
                self._student_service.update_student(student_id, student_data.full_name, student_data.email)
                return self._student_to_response(student)

        @self.app.post("/students/{student_id}/deactivate", response_model=StudentResponse)
        async def deactivate_student(student_id: str):
            """Deactivate a student."""
            with self._lock:
                student = self._require_student(student_id)
                self._student_service.deactivate_student(student_id)
                return self._student_to_response(student)

        @self.app.get("/students/{student_id}/transcript", response_model=TranscriptResponse)
        async def get_transcript(student_id: str):
            """Get a student's transcript."""
            with self._lock:
                student = self._require_student(student_id)
                return TranscriptResponse(
                    student_id=student.id,
                    gpa=student.calculate_gpa(),
                    transcript=student.transcript(),
                )

        @self.app.get("/students/{student_id}/enrollments", response_model=List[EnrollmentResponse])
        async def get_student_enrollments(student_id: str):
            """Get student enrollments."""
            with self._lock:
                enrollments = self._enrollment_service.get_student_enrollments(student_id)
                return [self._enrollment_to_response(e) for e in enrollments]

        @self.app.delete("/students/{student_id}/enrollments/{course_code}",
                         response_model=DataOperationResponse)
        async def unenroll_student(student_id: str, course_code: str):
            """Drop a student's enrollment in a course."""
            with self._lock:
                dropped = self._enrollment_service.unenroll_student(student_id, course_code)
                return DataOperationResponse(
                    success=dropped,
                    message="Student unenrolled" if dropped else "No matching enrollment",
                )

        # Instructor endpoints
        @self.app.post("/instructors", response_model=InstructorResponse, status_code=status.HTTP_201_CREATED)
        async def create_instructor(instructor_data: InstructorCreate):
            """Create a new instructor."""
            with self._lock:
                instructor = Instructor(
                    instructor_data.instructor_id,
                    instructor_data.full_name,
                    instructor_data.email,
                    instructor_data.department,
                )
                self._instructor_service.add_instructor(instructor)
                return self._instructor_to_response(instructor)

        @self.app.get("/instructors", response_model=List[InstructorResponse])
        async def list_instructors():
            """List all instructors."""
            with self._lock:
                return [self._instructor_to_response(i) for i in self._instructor_service.list_instructors()]

        # Course endpoints
        @self.app.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
        async def create_course(course_data: CourseCreate):
            """Create a new course."""
            try:
                with self._lock:
                    instructor = None
                    if course_data.instructor_id:
                        instructor = self._instructor_service.get_instructor(course_data.instructor_id)
                        if instructor is None:
                            raise HTTPException(status_code=404, detail="Instructor not found")

                    course = Course.build(
                        course_data.course_code,
                        course_data.title,
                        course_data.credits,
                        semester=course_data.semester,
                        department=course_data.department,
                        instructor=instructor,
                    )
                    self._course_service.add_course(course)
                    return self._course_to_response(course)

            except CCRMException as e:
                raise _to_http_exception(e)

        @self.app.get("/courses", response_model=List[CourseResponse])
        async def list_courses(instructor_id: Optional[str] = None, department: Optional[str] = None,
                               semester: Optional[Semester] = None, q: Optional[str] = None):
            """List courses, optionally filtered."""
            with self._lock:
                if instructor_id is not None:
                    courses = self._course_service.search_by_instructor(instructor_id)
                elif department is not None:
                    courses = self._course_service.search_by_department(department)
                elif semester is not None:
                    courses = self._course_service.search_by_semester(semester)
                elif q is not None:
                    courses = self._course_service.search(q)
                else:
                    courses = self._course_service.list_courses()
                return [self._course_to_response(c) for c in courses]

        @self.app.get("/courses/{course_code}", response_model=CourseResponse)
        async def get_course(course_code: str):
            """Get a course by code."""
            with self._lock:
                return self._course_to_response(self._require_course(course_code))

        @self.app.put("/courses/{course_code}", response_model=CourseResponse)
        async def update_course(course_code: str, course_data: CourseUpdate):
            """Update a course's title, credits and department."""
            with self._lock:
                course = self._require_course(course_code)
                self._course_service.update_course(
                    course_code, course_data.title, course_data.credits, course_data.department)
                return self._course_to_response(course)

        @self.app.post("/courses/{course_code}/deactivate", response_model=CourseResponse)
        async def deactivate_course(course_code: str):
            """Deactivate a course."""
            with self._lock:
                course = self._require_course(course_code)
                self._course_service.deactivate_course(course_code)
                return self._course_to_response(course)

        # Enrollment endpoints
        @self.app.post("/enrollments", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
        async def enroll_student(enrollment_data: EnrollmentCreate):
            """Enroll a student in a course for a semester."""
            try:
                with self._lock:
                    enrollment = self._enrollment_service.enroll_student(
                        enrollment_data.student_id,
                        enrollment_data.course_code,
                        enrollment_data.semester,
                        enrollment_data.year,
                    )
                    return self._enrollment_to_response(enrollment)

            except CCRMException as e:
                raise _to_http_exception(e)

        @self.app.post("/grades", response_model=DataOperationResponse)
        async def record_grade(grade_data: GradeRecord):
            """Record marks for an enrollment. Unknown students and courses are ignored."""
            with self._lock:
                self._enrollment_service.record_grade(
                    grade_data.student_id, grade_data.course_code, grade_data.marks)
                return DataOperationResponse(success=True, message="Grade recorded")

        # Report endpoints
        @self.app.get("/reports/gpa", response_model=ReportResponse)
        async def gpa_report():
            """GPA distribution and top student."""
            with self._lock:
                top = self._report_service.top_student()
                return ReportResponse(
                    distribution=self._report_service.gpa_distribution(),
                    top_student_id=top.id if top else None,
                    top_student_gpa=top.calculate_gpa() if top else None,
                )

        @self.app.get("/statistics", response_model=Dict[str, Any])
        async def get_statistics():
            """Get enrollment statistics."""
            with self._lock:
                return self._enrollment_service.get_statistics()

        # Data endpoints
        @self.app.post("/data/export", response_model=DataOperationResponse)
        async def export_data():
            """Export all catalogs and enrollments as CSV."""
            try:
                with self._lock:
                    files = [
                        self._file_service.export_students(self._student_service.list_students()),
                        self._file_service.export_courses(self._course_service.list_courses()),
                        self._file_service.export_instructors(self._instructor_service.list_instructors()),
                        self._file_service.export_enrollments(self._enrollment_service),
                    ]
                    return DataOperationResponse(success=True, message="Data exported successfully",
                                                 details={'files': files})

            except CCRMException as e:
                raise _to_http_exception(e)

        @self.app.post("/data/import", response_model=DataOperationResponse)
        async def import_data():
            """Import catalogs and enrollments from CSV."""
            try:
                with self._lock:
                    instructors = self._file_service.import_instructors()
                    for instructor in instructors:
                        self._instructor_service.add_instructor(instructor)
                    students = self._file_service.import_students()
                    for student in students:
                        self._student_service.add_student(student)
                    courses = self._file_service.import_courses(self._instructor_service.as_mapping())
                    for course in courses:
                        self._course_service.add_course(course)
                    enrollments = self._file_service.import_enrollments(self._enrollment_service)

                    return DataOperationResponse(
                        success=True,
                        message="Data imported successfully",
                        details={
                            'instructors': len(instructors),
                            'students': len(students),
                            'courses': len(courses),
                            'enrollments': enrollments,
                        },
                    )

            except CCRMException as e:
                raise _to_http_exception(e)

        @self.app.post("/data/backup", response_model=DataOperationResponse)
        async def backup_data():
            """Back up the data directory."""
            try:
                with self._lock:
                    backup_dir = self._file_service.backup_data()
                    return DataOperationResponse(
                        success=True,
                        message="Backup completed successfully",
                        details={'backup_dir': backup_dir, 'backup_size': self._file_service.get_backup_size()},
                    )

            except CCRMException as e:
                raise _to_http_exception(e)

    def _require_student(self, student_id: str) -> Student:
        student = self._student_service.get_student(student_id)
        if student is None:
            raise HTTPException(status_code=404, detail="Student not found")
        return student

    def _require_course(self, course_code: str) -> Course:
        course = self._course_service.get_course(course_code)
        if course is None:
            raise HTTPException(status_code=404, detail="Course not found")
        return course

    def _student_to_response(self, student: Student) -> StudentResponse:
        """Convert Student entity to response model."""
        return StudentResponse(
            student_id=student.id,
            reg_no=student.reg_no,
            full_name=student.full_name,
            email=student.email,
            active=student.active,
            gpa=student.calculate_gpa(),
            enrollments=list(student.enrollments),
            profile=student.get_profile(),
            created_at=student.created_at,
            updated_at=student.updated_at,
            version=student.version,
        )

    def _instructor_to_response(self, instructor: Instructor) -> InstructorResponse:
        """Convert Instructor entity to response model."""
        return InstructorResponse(
            instructor_id=instructor.id,
            full_name=instructor.full_name,
            email=instructor.email,
            department=instructor.department,
            active=instructor.active,
            profile=instructor.get_profile(),
        )

    def _course_to_response(self, course: Course) -> CourseResponse:
        """Convert Course entity to response model."""
        return CourseResponse(
            course_code=course.code.code,
            title=course.title,
            credits=course.credits,
            department=course.department,
            semester=course.semester,
            instructor_id=course.instructor.id if course.instructor else None,
            active=course.active,
        )

    def _enrollment_to_response(self, enrollment: Enrollment) -> EnrollmentResponse:
        """Convert Enrollment entity to response model."""
        grade = enrollment.grade
        return EnrollmentResponse(
            enrollment_id=enrollment.id,
            student_id=enrollment.student.id,
            course_code=enrollment.course.code.code,
            title=enrollment.course.title,
            semester=enrollment.semester,
            year=enrollment.year,
            marks=enrollment.marks,
            grade=grade.name if grade else None,
            grade_points=grade.points if grade else None,
            created_at=enrollment.created_at,
        )
