"""
Router utility functions.

Dependencies: paperdesk.models.document
System role: Path parameter helpers shared by routers
"""

from paperdesk.models.document import DocumentRef

# Path segment addressing the root project (documents stored without a project prefix)
ROOT_PROJECT = "_"


def project_key(project_id: str) -> str:
    """Translate the project path parameter to the stored project id."""
    return "" if project_id == ROOT_PROJECT else project_id


def document_ref(project_id: str, path: str) -> DocumentRef:
    return DocumentRef(project_id=project_key(project_id), path=path.lstrip("/"))
