"""Uploaded file DTOs and content-type inference for multipart uploads."""

from __future__ import annotations

from pathlib import PurePath

from assistctl.domain.common import WireModel

DEFAULT_MIME_TYPE = "application/octet-stream"

# Extensions the file_search/code_interpreter tools accept.
MIME_TYPES: dict[str, str] = {
    "c": "text/x-c",
    "cpp": "text/x-c++",
    "css": "text/css",
    "csv": "text/csv",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "html": "text/html",
    "java": "text/x-java",
    "js": "text/javascript",
    "json": "application/json",
    "md": "text/markdown",
    "pdf": "application/pdf",
    "php": "text/x-php",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "py": "text/x-python",
    "rb": "text/x-ruby",
    "tex": "text/x-tex",
    "ts": "application/typescript",
    "txt": "text/plain",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "xml": "application/xml",
}


def mime_type_for(file_name: str) -> str:
    """Content type for *file_name* by extension, falling back to octet-stream."""
    suffix = PurePath(file_name).suffix.lstrip(".").lower()
    return MIME_TYPES.get(suffix, DEFAULT_MIME_TYPE)


class FileObject(WireModel):
    id: str
    object: str = "file"
    bytes: int | None = None
    created_at: int
    filename: str
    purpose: str
    status: str | None = None
