"""
Script to add sample data to the CCRM platform via REST API.
Make sure the server is running before executing this script.

Usage:
    python add_data.py
"""

import requests
import sys
import os


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"
_WARN_CHAR = "⚠" if _console_supports_utf8() else "[WARN]"


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `CCRM_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("CCRM_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://127.0.0.1:8888",
        "http://localhost:8000",
        "http://localhost:8888",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


BASE_URL = _detect_base_url()


def check_server():
    """Check if the server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running")
            return True
    except requests.exceptions.RequestException:
        pass
    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m ccrm.main --rest-port 8888")
    return False


def _post(path, data, expected_status, label):
    try:
        response = requests.post(f"{BASE_URL}{path}", json=data)
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error {label}: {e}")
        return None
    if response.status_code == expected_status:
        print(f"{_OK_CHAR} {label}")
        return response.json()
    print(f"{_FAIL_CHAR} Failed {label}: {response.text}")
    return None


def create_instructor(instructor_id, full_name, email, department):
    """Create a new instructor."""
    data = {
        "instructor_id": instructor_id,
        "full_name": full_name,
        "email": email,
        "department": department,
    }
    return _post("/instructors", data, 201, f"created instructor {full_name} ({instructor_id})")


def create_student(student_id, reg_no, full_name, email):
    """Create a new student."""
    data = {
        "student_id": student_id,
        "reg_no": reg_no,
        "full_name": full_name,
        "email": email,
    }
    return _post("/students", data, 201, f"created student {full_name} ({student_id})")


def create_course(course_code, title, credits, department, semester="FALL", instructor_id=None):
    """Create a new course."""
    data = {
        "course_code": course_code,
        "title": title,
        "credits": credits,
        "department": department,
        "semester": semester,
        "instructor_id": instructor_id,
    }
    return _post("/courses", data, 201, f"created course {course_code} - {title}")


def enroll_student(student_id, course_code, semester, year):
    """Enroll a student in a course."""
    data = {
        "student_id": student_id,
        "course_code": course_code,
        "semester": semester,
        "year": year,
    }
    try:
        response = requests.post(f"{BASE_URL}/enrollments", json=data)
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error enrolling student: {e}")
        return None
    if response.status_code == 201:
        print(f"{_OK_CHAR} Enrolled {student_id} in {course_code} ({semester} {year})")
        return response.json()
    if response.status_code in (400, 409):
        detail = response.json().get("detail", {})
        print(f"{_WARN_CHAR} {student_id} not enrolled in {course_code}: {detail.get('message', detail)}")
        return None
    print(f"{_FAIL_CHAR} Failed to enroll student: {response.text}")
    return None


def record_grade(student_id, course_code, marks):
    """Record marks for an enrollment."""
    data = {"student_id": student_id, "course_code": course_code, "marks": marks}
    return _post("/grades", data, 200, f"recorded {marks} for {student_id} in {course_code}")


def show_transcript(student_id):
    """Print a student's transcript."""
    try:
        response = requests.get(f"{BASE_URL}/students/{student_id}/transcript")
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error getting transcript: {e}")
        return None
    if response.status_code == 200:
        print()
        print(response.json()["transcript"])
        return response.json()
    print(f"{_FAIL_CHAR} Failed to get transcript: {response.text}")
    return None


def show_report():
    """Print the GPA report."""
    try:
        response = requests.get(f"{BASE_URL}/reports/gpa")
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error getting report: {e}")
        return None
    if response.status_code != 200:
        print(f"{_FAIL_CHAR} Failed to get report: {response.text}")
        return None

    report = response.json()
    print(f"\n{'='*60}")
    print("GPA Distribution")
    print(f"{'='*60}")
    for band, count in report["distribution"].items():
        print(f"  {band:12} | {count} students")
    if report["top_student_id"]:
        print(f"  Top student: {report['top_student_id']} (GPA: {report['top_student_gpa']:.2f})")
    return report


def main():
    """Main execution."""
    print("="*60)
    print("CCRM - Data Addition Script")
    print("="*60)
    print()

    if not check_server():
        sys.exit(1)

    print("\nCreating instructors...")
    create_instructor("I003", "Dr. Rao", "rao@uni.edu", "Physics")
    create_instructor("I004", "Dr. Mehta", "mehta@uni.edu", "English")

    print("\nCreating courses...")
    create_course("PHY101", "Mechanics", 4, "Physics", instructor_id="I003")
    create_course("ENG101", "English Composition", 3, "English", instructor_id="I004")
    create_course("CS499", "Capstone Project", 20, "Computer Science")

    print("\nCreating students...")
    create_student("S003", "2023003", "Priya Sharma", "priya.sharma@student.edu")
    create_student("S004", "2023004", "Rohan Verma", "rohan.verma@student.edu")

    print("\nEnrolling students...")
    enroll_student("S003", "PHY101", "FALL", 2024)
    enroll_student("S003", "ENG101", "FALL", 2024)
    enroll_student("S004", "ENG101", "FALL", 2024)
    # Over the credit cap: 7 + 20 > 24
    enroll_student("S003", "CS499", "FALL", 2024)
    # Already enrolled, whatever the semester
    enroll_student("S004", "ENG101", "SPRING", 2025)

    print("\nRecording grades...")
    record_grade("S003", "PHY101", 84)
    record_grade("S003", "ENG101", 71.5)
    record_grade("S004", "ENG101", 93)

    show_transcript("S003")
    show_transcript("S004")
    show_report()

    print("\n" + "="*60)
    print(f"{_OK_CHAR} Sample data added successfully!")
    print("="*60)
    print("\nYou can now:")
    print(f"  - View API docs: {BASE_URL}/docs")
    print(f"  - List students: curl {BASE_URL}/students")
    print(f"  - List courses: curl {BASE_URL}/courses")
    print(f"  - Export data: curl -X POST {BASE_URL}/data/export")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
