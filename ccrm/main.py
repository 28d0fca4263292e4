"""
Main entry point for the CCRM platform.
"""

import threading
import time
from typing import Optional

from .app_logger import setup_logging
from .config import CCRMConfig, load_config
from .core.entities import Student, Instructor, Course
from .core.enums import Semester
from .core.exceptions import CCRMException
from .persistence import FileService
from .services import (
    StudentService, InstructorService, CourseService, EnrollmentService, ReportService,
)
from .api.rest_api import CCRMRestAPI


class CCRMPlatform:
    """Main platform class that wires all services together."""

    def __init__(self, config: Optional[CCRMConfig] = None):
        self._config = config or CCRMConfig()
        self._rest_thread = None
        self._running = False

        self._initialize_platform()

    @property
    def config(self) -> CCRMConfig:
        return self._config

    @property
    def students(self) -> StudentService:
        return self._student_service

    @property
    def instructors(self) -> InstructorService:
        return self._instructor_service

    @property
    def courses(self) -> CourseService:
        return self._course_service

    @property
    def enrollments(self) -> EnrollmentService:
        return self._enrollment_service

    @property
    def reports(self) -> ReportService:
        return self._report_service

    @property
    def files(self) -> FileService:
        return self._file_service

    @property
    def rest_api(self) -> CCRMRestAPI:
        return self._rest_api

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        print("Initializing CCRM platform...")

        self._file_service = FileService(self._config.data_directory)
        print(f"✓ Data directory ready: {self._config.data_directory}")

        self._student_service = StudentService()
        self._instructor_service = InstructorService()
        self._course_service = CourseService()
        self._enrollment_service = EnrollmentService(
            self._student_service,
            self._course_service,
            max_credits_per_semester=self._config.max_credits_per_semester,
        )
        self._report_service = ReportService(self._student_service)
        print("✓ Services initialized")

        self._rest_api = CCRMRestAPI(
            self._student_service,
            self._instructor_service,
            self._course_service,
            self._enrollment_service,
            self._report_service,
            self._file_service,
        )
        print("✓ REST API initialized")

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Start the REST server."""
        import uvicorn

        host = host or self._config.host
        port = port or self._config.rest_port

        def run_server():
            uvicorn.run(
                self._rest_api.app,
                host=host,
                port=port,
                log_level=self._config.log_level.lower()
            )

        # Start server in a separate thread
        self._rest_thread = threading.Thread(target=run_server, daemon=True)
        self._rest_thread.start()
        self._running = True

        print(f"✓ REST server started on {host}:{port}")
        print(f"  - API Docs: http://localhost:{port}/docs")

    def stop_platform(self):
        """Stop the platform."""
        if not self._running:
            return
        self._running = False
        print("✓ CCRM platform stopped")

    def create_sample_data(self):
        """Create sample data for demonstration."""
        print("Creating sample data...")

        sumit = Instructor("I001", "Dr. Sumit", "sumit@uni.edu", "Computer Science")
        jaiswal = Instructor("I002", "Dr. Jaiswal", "jaiswal@uni.edu", "Mathematics")
        for instructor in (sumit, jaiswal):
            self._instructor_service.add_instructor(instructor)

        self._course_service.add_course(Course.build(
            "CS101", "Introduction to Programming", 3,
            semester=Semester.FALL, department="Computer Science", instructor=sumit,
        ))
        self._course_service.add_course(Course.build(
            "MATH101", "Calculus I", 4,
            semester=Semester.FALL, department="Mathematics", instructor=jaiswal,
        ))

        self._student_service.add_student(
            Student("S001", "2023001", "Ankit Choudhary", "ankit.choudhary@student.edu"))
        self._student_service.add_student(
            Student("S002", "2023002", "Sarvagya Joshi", "sarvagya.joshi@student.edu"))

        print("✓ Sample data created")

    def run_demo(self):
        """Run a demonstration of the platform."""
        print("Running CCRM platform demonstration...")

        self.create_sample_data()

        print("\n=== Enrollment Demo ===")
        for student_id, course_code in (("S001", "CS101"), ("S001", "MATH101"), ("S002", "CS101"),
                                        ("S001", "CS101")):
            try:
                self._enrollment_service.enroll_student(student_id, course_code, Semester.FALL, 2024)
                print(f"✓ Enrolled {student_id} in {course_code}")
            except CCRMException as e:
                print(f"✗ {student_id} in {course_code}: {e.message}")

        self._enrollment_service.record_grade("S001", "CS101", 92)
        self._enrollment_service.record_grade("S001", "MATH101", 78.5)
        self._enrollment_service.record_grade("S002", "CS101", 64)

        print("\n=== Transcripts ===")
        for student in self._student_service.list_students():
            print(student.transcript())

        print(self._report_service.render())

        backup_dir = self._file_service.backup_data()
        print(f"\n✓ Backup written to {backup_dir} ({self._file_service.get_backup_size()} bytes)")

        print("\n✓ Demo completed")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Campus Course & Records Manager")
    parser.add_argument("--host", type=str, help="REST server host")
    parser.add_argument("--rest-port", type=int, help="REST server port")
    parser.add_argument("--data-dir", type=str, help="Data directory for CSV files and backups")
    parser.add_argument("--max-credits", type=int, help="Maximum credits per semester")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--config", type=str, help="Configuration file path")

    args = parser.parse_args()

    config = load_config(
        args.config,
        host=args.host,
        rest_port=args.rest_port,
        data_directory=args.data_dir,
        max_credits_per_semester=args.max_credits,
    )
    setup_logging(config.log_level)

    platform = CCRMPlatform(config)

    try:
        if args.demo:
            platform.run_demo()
        else:
            platform.create_sample_data()
            platform.start_rest_server()

            # Keep running
            print("\nPlatform is running. Press Ctrl+C to stop.")
            while True:
                time.sleep(1)

    except KeyboardInterrupt:
        print("\nShutting down...")
        platform.stop_platform()


if __name__ == "__main__":
    main()
