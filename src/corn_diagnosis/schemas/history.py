from pydantic import BaseModel, ConfigDict, Field


class HistoryRecord(BaseModel):
    """One past diagnosis, stored with the field names of the saved history."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    diagnosis: str
    confidence: str
    timestamp: str
    file_name: str = Field(alias="fileName")


class HistoryResponse(BaseModel):
    """Response schema for GET /history."""
    count: int
    records: list[HistoryRecord]
