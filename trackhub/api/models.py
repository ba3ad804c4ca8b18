"""Request and response models for the trackhub HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DocumentWriteRequest(BaseModel):
    path: Optional[str] = None
    content: Optional[str] = None
    message: Optional[str] = None


class RecordWriteRequest(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None
    message: Optional[str] = None


class DocumentResponse(BaseModel):
    content: str
    sha: str


class RecordResponse(DocumentResponse):
    path: str


class FileEntry(BaseModel):
    name: str
    path: str
    sha: str


class ListResponse(BaseModel):
    files: List[FileEntry]


class MirrorStatus(BaseModel):
    """Whether the local mirror was updated after the remote commit."""

    ok: bool
    error: Optional[str] = None


class WriteResponse(BaseModel):
    ok: bool = True
    sha: str
    commit: Dict[str, Any] = Field(default_factory=dict)
    mirror: MirrorStatus


class RecordWriteResponse(WriteResponse):
    path: str


class HealthResponse(BaseModel):
    status: str
    service: str
    remote: str


class ErrorResponse(BaseModel):
    message: str
    error_code: Optional[str] = None


class ConflictResponse(ErrorResponse):
    """Returned with 409 so clients can re-fetch and resubmit."""

    path: Optional[str] = None
    expected_sha: Optional[str] = None
