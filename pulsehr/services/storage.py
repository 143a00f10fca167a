import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, Optional
from urllib.parse import quote

from fastapi import UploadFile, HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_415_UNSUPPORTED_MEDIA_TYPE,
)

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = (".pdf",)
PDF_MIME_TYPES = ("application/pdf",)

IDENTITY_DOC_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png")
IDENTITY_DOC_MIME_TYPES = ("application/pdf", "image/jpeg", "image/png")


@dataclass
class StoredFile:
    name: str
    mime_type: str
    size: int
    content_base64: str


class DocumentStorage:
    """
    Validates incoming files and turns them into base64 text for the database.
    No file ever touches the local disk.
    """

    def __init__(self, max_upload_mb: int = 50):
        self.max_upload_bytes = max_upload_mb * 1024 * 1024

    # ---------- public API ----------

    def read_pdf_upload(self, file: UploadFile) -> tuple[StoredFile, bytes]:
        """
        Read a multipart PDF upload. Returns the stored form and the raw bytes.
        """
        name = self._clean_name(file.filename)
        self._check_type(name, file.content_type, PDF_EXTENSIONS, PDF_MIME_TYPES, "Only PDF files are accepted")

        contents = file.file.read()
        self._check_size(len(contents))

        stored = StoredFile(
            name=name,
            mime_type="application/pdf",
            size=len(contents),
            content_base64=self.encode(contents),
        )
        return stored, contents

    def read_base64(
        self,
        content_base64: str,
        file_name: str,
        mime_type: Optional[str],
        extensions: Iterable[str] = IDENTITY_DOC_EXTENSIONS,
        mime_types: Iterable[str] = IDENTITY_DOC_MIME_TYPES,
    ) -> StoredFile:
        """
        Validate a JSON base64 payload (data-URL prefix tolerated).
        """
        name = self._clean_name(file_name)
        self._check_type(name, mime_type, extensions, mime_types, "Unsupported file type")

        # "data:application/pdf;base64,XXXX" -> "XXXX"
        payload = (content_base64 or "").split(",")[-1].strip()
        if not payload:
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Empty file content")

        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="File content is not valid base64")

        self._check_size(len(raw))

        guessed = mime_type if mime_type in tuple(mime_types) else self._mime_from_name(name)
        return StoredFile(name=name, mime_type=guessed, size=len(raw), content_base64=payload)

    @staticmethod
    def encode(data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def decode(content_base64: str) -> bytes:
        return base64.b64decode(content_base64 or "")

    # ---------- internals ----------

    def _check_size(self, size: int) -> None:
        if size > self.max_upload_bytes:
            raise HTTPException(
                status_code=HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large (max {self.max_upload_bytes // (1024 * 1024)} MB)",
            )

    @staticmethod
    def _check_type(
        name: str,
        mime_type: Optional[str],
        extensions: Iterable[str],
        mime_types: Iterable[str],
        detail: str,
    ) -> None:
        # extension OR mime is enough, browsers are inconsistent with the latter
        if name.lower().endswith(tuple(extensions)) or (mime_type or "") in tuple(mime_types):
            return
        logger.warning("Rejected upload %r (%s)", name, mime_type)
        raise HTTPException(status_code=HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=detail)

    @staticmethod
    def _clean_name(file_name: Optional[str]) -> str:
        # strip any client side directory
        name = PurePath((file_name or "").replace("\\", "/")).name.strip()
        if not name:
            raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Missing file name")
        return name

    @staticmethod
    def _mime_from_name(name: str) -> str:
        lower = name.lower()
        if lower.endswith(".pdf"):
            return "application/pdf"
        if lower.endswith((".jpg", ".jpeg")):
            return "image/jpeg"
        if lower.endswith(".png"):
            return "image/png"
        return "application/octet-stream"


def content_disposition(disposition: str, file_name: str) -> str:
    """
    Header value safe for any stored name: printable ASCII fallback
    plus the exact UTF-8 name (RFC 5987 `filename*`).
    """
    fallback = "".join(c for c in file_name if 32 <= ord(c) < 127 and c not in '"\\').strip()
    if not fallback.strip(" ."):
        fallback = "download"
    elif fallback.startswith("."):
        fallback = "download" + fallback
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"
