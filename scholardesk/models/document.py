"""Document data model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from scholardesk.models.common import isoformat, utcnow


class DocumentStatus(Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class Document:
    """A document selected for analysis within a session."""

    name: str
    status: DocumentStatus = DocumentStatus.PROCESSING
    upload_timestamp: datetime = field(default_factory=utcnow)

    @property
    def file_type(self) -> str:
        """Extension of the document name, defaulting to pdf."""
        _, dot, ext = self.name.rpartition(".")
        return ext.lower() if dot and ext else "pdf"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "uploadTimestamp": isoformat(self.upload_timestamp),
            "status": self.status.value,
        }
