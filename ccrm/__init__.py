"""
CCRM: Campus Course & Records Manager

Records students, courses, enrollments and grades for an academic
institution, computes GPAs and transcripts, and exports, imports and backs
up its data as CSV.
"""

__version__ = "1.0.0"
__author__ = "CCRM Development Team"
__description__ = "Campus Course & Records Manager"
