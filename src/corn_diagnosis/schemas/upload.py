from pydantic import BaseModel, Field


class ImageCandidate(BaseModel):
    """An image staged by the user but not yet submitted."""
    data: bytes = Field(exclude=True, repr=False)
    media_type: str
    file_name: str
    size: int


class CandidateInfo(BaseModel):
    """Metadata of the staged candidate exposed to the UI."""
    file_name: str
    media_type: str
    size: int
    preview_url: str = "/workflow/preview"
