from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class UsageRecord(BaseModel):
    """One CPAP usage event. Both fields are opaque strings."""
    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description='Caller convention, e.g. "YYYY-MM-DD"')
    time: str = Field(..., description='Caller convention, e.g. "HH:MM"')

EntryCollection = List[UsageRecord]

class SaveEntriesRequest(BaseModel):
    entries: List[UsageRecord] = Field(...)

class EntriesResponse(BaseModel):
    entries: List[UsageRecord]
    count: int
    warning: Optional[str] = None
