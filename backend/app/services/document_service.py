"""
Document Service - validates uploaded PDFs and stores them on disk

Uploads are written under UPLOADS_PATH as <epoch ms>-<random hex>-<name>
and recorded on the order item as /uploads/<name>. They are only served
through the authenticated order item download route.
"""

import io
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import aiofiles
import PyPDF2
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import FileTooLargeError, InvalidDocumentError, InvalidFileTypeError
from app.core.logging_config import logger


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

UPLOAD_URL_PREFIX = "/uploads/"


@dataclass
class UploadedDocument:
    """A validated upload that has not been written to disk yet"""
    file_name: str
    content: bytes
    page_count: int

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class StoredDocument:
    file_name: str
    file_url: str
    page_count: int
    size: int


def sanitize_file_name(file_name: str) -> str:
    """Strip directories and anything outside [A-Za-z0-9._-]"""
    name = Path(file_name or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "document.pdf"


def file_extension(file_name: str) -> str:
    return Path(file_name or "").suffix.lower().lstrip(".")


def stored_file_name(file_name: str) -> str:
    """Unique on-disk name; the random part keeps same-millisecond uploads apart"""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{sanitize_file_name(file_name)}"


class DocumentService:
    """Upload validation, page counting and storage"""

    def __init__(self, upload_dir: Optional[Path] = None):
        self._upload_dir = upload_dir

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir or settings.UPLOAD_DIR

    def validate(self, file_name: str, content: bytes) -> None:
        allowed = settings.ALLOWED_EXTENSIONS
        if file_extension(file_name) not in allowed:
            raise InvalidFileTypeError(file_name, allowed)
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise FileTooLargeError(file_name, settings.MAX_UPLOAD_SIZE)
        if not content:
            raise InvalidDocumentError(file_name, "File is empty")

    def count_pages(self, file_name: str, content: bytes) -> int:
        """Number of pages in a PDF; unreadable or empty documents are rejected"""
        try:
            reader = PyPDF2.PdfReader(io.BytesIO(content))
            page_count = len(reader.pages)
        except Exception as e:
            logger.warning(f"[Documents] Could not read {file_name}: {e}")
            raise InvalidDocumentError(file_name) from e

        if page_count < 1:
            raise InvalidDocumentError(file_name, "PDF has no pages")
        return page_count

    def path_for(self, file_url: str) -> Path:
        """On-disk path of a stored /uploads/<name> reference"""
        return self.upload_dir / Path(file_url or "").name

    async def save(self, file_name: str, content: bytes) -> str:
        """Write content to the uploads directory and return its /uploads/ reference"""
        stored_name = stored_file_name(file_name)
        path = self.upload_dir / stored_name
        path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(path, "xb") as f:
            await f.write(content)

        logger.debug(f"[Documents] Stored {file_name} as {stored_name} ({len(content)} bytes)")
        return f"{UPLOAD_URL_PREFIX}{stored_name}"

    def delete(self, file_url: str) -> None:
        path = self.path_for(file_url)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.debug(f"[Documents] Removed {path.name}")

    async def read_upload(self, upload: UploadFile) -> UploadedDocument:
        """Read and validate an upload without storing it"""
        file_name = upload.filename or "document.pdf"
        content = await upload.read()

        self.validate(file_name, content)
        page_count = self.count_pages(file_name, content)
        return UploadedDocument(file_name=file_name, content=content, page_count=page_count)

    async def store_all(self, documents: List[UploadedDocument]) -> List[StoredDocument]:
        """
        Write every document, or none of them.

        Files already written are removed again when a later write fails.
        """
        stored: List[StoredDocument] = []
        try:
            for document in documents:
                file_url = await self.save(document.file_name, document.content)
                stored.append(StoredDocument(
                    file_name=document.file_name,
                    file_url=file_url,
                    page_count=document.page_count,
                    size=document.size,
                ))
        except OSError as e:
            logger.log_error_with_context(e, "store_all", stored=len(stored))
            self.discard(stored)
            raise
        return stored

    def discard(self, documents: Iterable) -> None:
        """Remove the stored files behind documents or order items (anything with file_url)"""
        for document in documents:
            self.delete(document.file_url)


document_service = DocumentService()
