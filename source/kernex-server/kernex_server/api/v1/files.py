"""Project file browser API endpoints.

Every path is confined to the configured project root before it
touches the filesystem.
"""

import asyncio
import logging

from fastapi import APIRouter, Body, Depends, Query, status

from kernex_core.workspace.files import ProjectFiles
from kernex_core.workspace.tree import FileNode
from kernex_server.api.deps import KernexException, get_project_files
from kernex_server.models.files import (
    FileContentResponse,
    FileCreateRequest,
    FileDeleteRequest,
    FileNodeResponse,
    FileOperationResponse,
    FileRenameRequest,
    FileTreeResponse,
    FileWriteRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


def _to_response(node: FileNode) -> FileNodeResponse:
    return FileNodeResponse(
        name=node.name,
        path=node.path,
        type=node.type,
        children=[_to_response(c) for c in node.children] if node.children is not None else None,
    )


@router.get("/tree", response_model=FileTreeResponse)
async def get_tree(
    path: str = Query("", description="Optional subdirectory to list"),
    files: ProjectFiles = Depends(get_project_files),
) -> FileTreeResponse:
    """Get the project tree, folders first."""
    nodes = await asyncio.to_thread(files.tree, path)
    return FileTreeResponse(tree=[_to_response(n) for n in nodes])


@router.get("/read", response_model=FileContentResponse)
async def read_file(
    path: str = Query(..., min_length=1, description="File path relative to the project root"),
    files: ProjectFiles = Depends(get_project_files),
) -> FileContentResponse:
    """Read a text file."""
    content = await asyncio.to_thread(files.read, path)
    return FileContentResponse(path=path, content=content)


@router.post("/write", response_model=FileOperationResponse)
async def write_file(
    request: FileWriteRequest,
    files: ProjectFiles = Depends(get_project_files),
) -> FileOperationResponse:
    """Write a text file, creating parent directories as needed."""
    written = await asyncio.to_thread(files.write, request.path, request.content)
    return FileOperationResponse(path=files.relative(written))


@router.post("/create", response_model=FileOperationResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: FileCreateRequest,
    files: ProjectFiles = Depends(get_project_files),
) -> FileOperationResponse:
    """Create an empty file or a folder."""
    created = await asyncio.to_thread(files.create, request.path, request.type)
    logger.info(f"Created {request.type}: {files.relative(created)}")
    return FileOperationResponse(path=files.relative(created))


@router.post("/rename", response_model=FileOperationResponse)
async def rename_entry(
    request: FileRenameRequest,
    files: ProjectFiles = Depends(get_project_files),
) -> FileOperationResponse:
    """Rename or move an entry."""
    target = await asyncio.to_thread(files.rename, request.old_path, request.new_path)
    return FileOperationResponse(path=files.relative(target))


@router.delete("/delete", response_model=FileOperationResponse)
async def delete_entry(
    path: str | None = Query(None, description="Path to delete (alternative to the body)"),
    request: FileDeleteRequest | None = Body(None),
    files: ProjectFiles = Depends(get_project_files),
) -> FileOperationResponse:
    """Delete a file or folder recursively. Missing paths succeed."""
    target = request.path if request is not None else path
    if not target:
        raise KernexException(
            error_code="VALIDATION_ERROR",
            message="path is required",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    deleted = await asyncio.to_thread(files.delete, target)
    if deleted:
        logger.info(f"Deleted: {target}")
    return FileOperationResponse(success=True, path=target)
