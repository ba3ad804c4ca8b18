"""API routes for reading and writing repository documents."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from trackhub.sync import BadRequest, SyncEngine, WriteResult

from .models import (
    DocumentResponse,
    DocumentWriteRequest,
    FileEntry,
    ListResponse,
    MirrorStatus,
    RecordResponse,
    RecordWriteRequest,
    RecordWriteResponse,
    WriteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_engine(request: Request) -> SyncEngine:
    """Sync engine built at startup and stored on the application."""
    return request.app.state.engine


def _write_fields(result: WriteResult) -> dict:
    return {
        "ok": True,
        "sha": result.version_tag,
        "commit": result.commit.raw,
        "mirror": MirrorStatus(ok=result.mirror_synced, error=result.mirror_error),
    }


@router.get("/data", response_model=DocumentResponse)
def read_document(
    path: Optional[str] = None, engine: SyncEngine = Depends(get_engine)
):
    """Read a document by its repository path."""
    if not path:
        raise BadRequest("Missing path")

    document = engine.read(path)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="File not found"
        )
    return DocumentResponse(content=document.content, sha=document.version_tag)


@router.post("/data", response_model=WriteResponse)
def write_document(
    body: DocumentWriteRequest, engine: SyncEngine = Depends(get_engine)
):
    """
    Create or update a document by its repository path.

    The current sha is looked up first and sent along with the write, so a
    concurrent change answers 409 instead of being overwritten.
    """
    if not body.path or body.content is None:
        raise BadRequest("Missing path/content")

    result = engine.write(body.path, body.content, body.message)
    return WriteResponse(**_write_fields(result))


@router.get("/list", response_model=ListResponse)
def list_directory(
    path: Optional[str] = None, engine: SyncEngine = Depends(get_engine)
):
    """List the files of a repository directory (e.g. ``records``)."""
    if not path:
        raise BadRequest("Missing path")

    listing = engine.list_directory(path)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return ListResponse(
        files=[
            FileEntry(name=entry.name, path=entry.path, sha=entry.version_tag)
            for entry in listing
        ]
    )


@router.post("/track/save", response_model=RecordWriteResponse)
def save_record(body: RecordWriteRequest, engine: SyncEngine = Depends(get_engine)):
    """Save a record under a path derived from its display name."""
    if not body.name or body.content is None:
        raise BadRequest("Missing name/content")

    result = engine.write_record(body.name, body.content, body.message)
    return RecordWriteResponse(path=result.path, **_write_fields(result))


@router.get("/track", response_model=RecordResponse)
def read_record(name: Optional[str] = None, engine: SyncEngine = Depends(get_engine)):
    """Read a record by display name; any spelling that sanitizes alike works."""
    if not name:
        raise BadRequest("Missing name")

    path, document = engine.read_record(name)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return RecordResponse(content=document.content, sha=document.version_tag, path=path)
