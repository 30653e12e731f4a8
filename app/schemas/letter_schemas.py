# app/schemas/letter_schemas.py

import datetime as dt
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

LetterType = Literal['dispensasi', 'keterangan', 'surat_tugas', 'lomba']
LetterStatus = Literal['pending', 'approved', 'rejected']


# Request schemas
class ParticipantInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    class_name: str = Field(alias="class")
    reason: Optional[str] = None


class LetterCreateRequest(BaseModel):
    # Required fields are checked by the service so the error message matches the UI
    date: Optional[dt.date] = None
    time_start: Optional[str] = None
    time_end: Optional[str] = None
    location: Optional[str] = None
    activity: Optional[str] = None
    letter_type: Optional[LetterType] = None
    reason: Optional[str] = None
    participants: Optional[List[ParticipantInput]] = None
    created_by: Optional[str] = None


class LetterUpdateRequest(BaseModel):
    """Partial update. Only keys present in the body are applied."""
    date: Optional[dt.date] = None
    time_start: Optional[str] = None
    time_end: Optional[str] = None
    location: Optional[str] = None
    activity: Optional[str] = None
    letter_type: Optional[LetterType] = None
    reason: Optional[str] = None
    participants: Optional[List[ParticipantInput]] = None
    status: Optional[LetterStatus] = None
    approved_by: Optional[str] = None


# Response schemas
class UserSummary(BaseModel):
    id: str
    name: str
    email: str


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    class_name: str = Field(serialization_alias="class")
    reason: Optional[str] = None


class LetterResponse(BaseModel):
    id: str
    letter_number: str
    date: dt.date
    time_start: str
    time_end: str
    location: str
    activity: str
    letter_type: str
    reason: Optional[str] = None
    status: str
    created_by: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[dt.datetime] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    creator: Optional[UserSummary] = None
    approver: Optional[UserSummary] = None
    participants: List[ParticipantResponse] = []


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class LetterListResponse(BaseModel):
    letters: List[LetterResponse]
    pagination: Pagination
