"""
Document reference and object store models.

Dependencies: pydantic
System role: Identity of a project file and object store listings
"""

from datetime import datetime

from pydantic import BaseModel, Field


class DocumentRef(BaseModel):
    """
    A project file identified by project id and relative path.

    Attributes:
        project_id: Owning project; empty string for the root project
        path: Path of the file inside the project
    """

    model_config = {"frozen": True}

    project_id: str = Field(default="")
    path: str

    @property
    def key(self) -> str:
        """Object store key of the raw file."""
        path = self.path.lstrip("/")
        return f"{self.project_id}/{path}" if self.project_id else path

    @property
    def is_pdf(self) -> bool:
        return self.path.lower().endswith(".pdf")


class ObjectStat(BaseModel):
    """Metadata returned by a HEAD request."""

    key: str
    size: int
    last_modified: datetime | None = None
    content_type: str | None = None


class ObjectEntry(BaseModel):
    """One entry of a bucket listing."""

    path: str
    is_dir: bool = False
    size: int | None = None
