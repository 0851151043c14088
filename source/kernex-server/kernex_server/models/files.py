"""Project file browser models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class FileNodeResponse(BaseModel):
    """One entry of the project tree."""

    name: str = Field(..., description="Entry name")
    path: str = Field(..., description="Path relative to the project root")
    type: Literal["file", "folder"] = Field(..., description="Entry kind")
    children: list[FileNodeResponse] | None = Field(None, description="Child entries of a folder")


FileNodeResponse.model_rebuild()


class FileTreeResponse(BaseModel):
    """Project tree response."""

    tree: list[FileNodeResponse] = Field(default_factory=list)


class FileContentResponse(BaseModel):
    """File read response."""

    path: str = Field(..., description="Path relative to the project root")
    content: str = Field(..., description="File contents (UTF-8)")


class FileWriteRequest(BaseModel):
    """Request body for writing a file."""

    path: str = Field(..., min_length=1, description="Path relative to the project root")
    content: str = Field("", description="New file contents")


class FileCreateRequest(BaseModel):
    """Request body for creating a file or folder."""

    path: str = Field(..., min_length=1, description="Path relative to the project root")
    type: Literal["file", "folder"] = Field("file", description="Entry kind to create")


class FileRenameRequest(BaseModel):
    """Request body for renaming or moving an entry."""

    old_path: str = Field(..., min_length=1, alias="oldPath", description="Current path")
    new_path: str = Field(..., min_length=1, alias="newPath", description="Destination path")

    model_config = {"populate_by_name": True}


class FileDeleteRequest(BaseModel):
    """Request body for deleting an entry."""

    path: str = Field(..., min_length=1, description="Path relative to the project root")


class FileOperationResponse(BaseModel):
    """Result of a mutating file operation."""

    success: bool = Field(True)
    path: str = Field(..., description="Affected path relative to the project root")
