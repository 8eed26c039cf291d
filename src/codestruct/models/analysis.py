"""Analysis ORM model: one immutable codebase analysis run."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from codestruct.models.base import Base


class Analysis(Base):
    __tablename__ = "analysis_results"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE")
    )
    detected_languages: Mapped[dict[str, float]] = mapped_column(
        JSON, default=dict
    )
    architecture: Mapped[str] = mapped_column(Text, default="")
    issues: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list
    )
    suggestions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "detectedLanguages": self.detected_languages,
            "architecture": self.architecture,
            "issues": self.issues,
            "suggestions": self.suggestions,
            "createdAt": self.created_at.isoformat(),
        }
