"""SQLAlchemy ORM models."""

from codestruct.models.analysis import Analysis
from codestruct.models.base import Base
from codestruct.models.project import Project
from codestruct.models.project_file import ProjectFile
from codestruct.models.user import User

__all__ = [
    "Analysis",
    "Base",
    "Project",
    "ProjectFile",
    "User",
]
