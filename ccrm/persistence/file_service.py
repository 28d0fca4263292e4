"""
CSV export/import and timestamped backups of the data directory.
"""

import csv
import os
import shutil
import threading
from datetime import datetime
from typing import Dict, List, Optional

from ..app_logger import get_logger
from ..core.entities import Course, Instructor, Student
from ..core.enums import Semester
from ..core.exceptions import CCRMException, PersistenceError
from ..core.interfaces import Persistable
from ..services.enrollment_service import EnrollmentService

logger = get_logger("files")

STUDENTS_FILE = "students.csv"
COURSES_FILE = "courses.csv"
INSTRUCTORS_FILE = "instructors.csv"
ENROLLMENTS_FILE = "enrollments.csv"
BACKUPS_DIR = "backups"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


class FileService:
    """Reads and writes the CSV files kept in the data directory."""

    def __init__(self, data_directory: str = "ccrm_data"):
        self._data_directory = data_directory
        self._lock = threading.RLock()
        self._ensure_directory_exists()

    @property
    def data_directory(self) -> str:
        return self._data_directory

    def _ensure_directory_exists(self) -> None:
        try:
            os.makedirs(self._data_directory, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create data directory: {e}")

    def _path(self, *parts: str) -> str:
        return os.path.join(self._data_directory, *parts)

    # Export

    def _write_rows(self, filename: str, records: List[Persistable]) -> str:
        path = self._path(filename)
        with self._lock:
            try:
                with open(path, "w", newline="", encoding="utf-8") as f:
                    writer = csv.writer(f)
                    for record in records:
                        writer.writerow(record.to_csv_row())
            except OSError as e:
                raise PersistenceError(f"Failed to write {filename}: {e}")
        logger.info("Exported %d rows to %s", len(records), path)
        return path

    def export_students(self, students: List[Student]) -> str:
        return self._write_rows(STUDENTS_FILE, students)

    def export_courses(self, courses: List[Course]) -> str:
        return self._write_rows(COURSES_FILE, courses)

    def export_instructors(self, instructors: List[Instructor]) -> str:
        return self._write_rows(INSTRUCTORS_FILE, instructors)

    def export_enrollments(self, enrollment_service: EnrollmentService) -> str:
        return self._write_rows(ENROLLMENTS_FILE, enrollment_service.list_enrollments())

    # Import

    def _read_rows(self, filename: str, min_columns: int) -> List[List[str]]:
        path = self._path(filename)
        if not os.path.exists(path):
            return []
        with self._lock:
            try:
                with open(path, "r", newline="", encoding="utf-8") as f:
                    rows = list(csv.reader(f))
            except (OSError, csv.Error) as e:
                raise PersistenceError(f"Failed to read {filename}: {e}")

        usable = [row for row in rows if len(row) >= min_columns]
        if len(usable) < len(rows):
            logger.warning("Skipped %d short rows in %s", len(rows) - len(usable), filename)
        return usable

    def import_students(self) -> List[Student]:
        students = []
        for row in self._read_rows(STUDENTS_FILE, 6):
            student = Student(row[0], row[1], row[2], row[3])
            student.set_active(_parse_bool(row[4]))
            try:
                student.set_created_at(datetime.fromisoformat(row[5]))
            except ValueError:
                logger.warning("Keeping fresh creation time for student %s: bad timestamp %r", row[0], row[5])
            students.append(student)
        return students

    def import_instructors(self) -> List[Instructor]:
        instructors = []
        for row in self._read_rows(INSTRUCTORS_FILE, 5):
            instructor = Instructor(row[0], row[1], row[2], row[3])
            instructor.set_active(_parse_bool(row[4]))
            instructors.append(instructor)
        return instructors

    def import_courses(self, instructors: Optional[Dict[str, Instructor]] = None) -> List[Course]:
        instructors = instructors or {}
        courses = []
        for row in self._read_rows(COURSES_FILE, 7):
            try:
                course = Course.build(
                    row[0],
                    row[1],
                    int(row[2]),
                    semester=Semester(row[4]),
                    department=row[5],
                    instructor=instructors.get(row[3]) if row[3] else None,
                )
            except (CCRMException, ValueError) as e:
                raise PersistenceError(f"Invalid course row {row!r}: {e}")
            course.set_active(_parse_bool(row[6]))
            courses.append(course)
        return courses

    def import_enrollments(self, enrollment_service: EnrollmentService) -> int:
        """Replay exported enrollments through the enrollment service.

        Rows the service rejects are logged and skipped. Returns the number
        of enrollments created.
        """
        created = 0
        for row in self._read_rows(ENROLLMENTS_FILE, 5):
            student_id, course_code = row[0], row[1]
            try:
                semester = Semester(row[2])
                year = int(row[3])
                marks = float(row[4]) if row[4] else None
            except ValueError as e:
                raise PersistenceError(f"Invalid enrollment row {row!r}: {e}")

            try:
                enrollment_service.enroll_student(student_id, course_code, semester, year)
            except CCRMException as e:
                logger.warning("Skipped enrollment %s/%s: %s", student_id, course_code, e.message)
                continue
            if marks is not None:
                enrollment_service.record_grade(student_id, course_code, marks)
            created += 1
        return created

    # Backups

    def backup_data(self) -> str:
        """Copy the data directory, minus earlier backups, into a timestamped folder."""
        timestamp = datetime.now().strftime(BACKUP_TIMESTAMP_FORMAT)
        backup_dir = self._path(BACKUPS_DIR, timestamp)
        with self._lock:
            try:
                os.makedirs(backup_dir, exist_ok=True)
                entries = os.listdir(self._data_directory)
            except OSError as e:
                raise PersistenceError(f"Failed to prepare backup: {e}")

            for name in entries:
                if name == BACKUPS_DIR:
                    continue
                source = self._path(name)
                target = os.path.join(backup_dir, name)
                try:
                    if os.path.isdir(source):
                        shutil.copytree(source, target, dirs_exist_ok=True)
                    else:
                        shutil.copy2(source, target)
                except OSError as e:
                    logger.error("Failed to backup %s: %s", name, e)

        logger.info("Backup written to %s", backup_dir)
        return backup_dir

    def get_backup_size(self) -> int:
        backups = self._path(BACKUPS_DIR)
        if not os.path.exists(backups):
            return 0
        return self._directory_size(backups)

    @staticmethod
    def _directory_size(path: str) -> int:
        if os.path.isfile(path):
            return os.path.getsize(path)
        total = 0
        for root, _dirs, files in os.walk(path):
            for name in files:
                try:
                    total += os.path.getsize(os.path.join(root, name))
                except OSError as e:
                    logger.warning("Could not size %s: %s", name, e)
        return total
