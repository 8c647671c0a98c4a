"""
Student records: staff CRUD, search and self-service profiles.
"""

from .service import StudentPage, StudentService

__all__ = ["StudentPage", "StudentService"]
