from pydantic import BaseModel


class LinkRequest(BaseModel):
    """Body for creating or validating a link.

    relationship_type is a plain string so that unknown types reach validation
    and come back as readable errors.
    """

    source_id: str = ""
    target_id: str = ""
    relationship_type: str = ""


class LinkCheck(BaseModel):
    exists: bool
    would_create_circular: bool
    path: list[str] = []
