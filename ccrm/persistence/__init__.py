"""
Persistence module for CSV import/export and backups.
"""

from .file_service import FileService

__all__ = [
    "FileService",
]
