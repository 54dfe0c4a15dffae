"""
File Upload Utility - validate and store uploaded files.

Upload kinds:
- resume    : PDF only, must be readable by PyPDF2
- avatar    : JPEG / PNG / GIF / WEBP images
- marksheet : PDF or image

Files are stored under <upload_dir>/<kind>s/ with a unique name and
served back from /uploads by StaticFiles.
"""

import io
import logging
import os
import uuid
from datetime import datetime
from typing import Optional

from fastapi import UploadFile
from PyPDF2 import PdfReader

from app.core.config import Settings, get_settings
from app.core.errors import BadRequestError, PayloadTooLargeError

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = {'.pdf'}
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}

ALLOWED_EXTENSIONS = {
    "resume": PDF_EXTENSIONS,
    "avatar": IMAGE_EXTENSIONS,
    "marksheet": PDF_EXTENSIONS | IMAGE_EXTENSIONS,
}

ALLOWED_MIMETYPES = {
    "resume": {"application/pdf"},
    "avatar": {"image/jpeg", "image/png", "image/gif", "image/webp"},
    "marksheet": {"application/pdf", "image/jpeg", "image/png", "image/gif", "image/webp"},
}

KIND_LABELS = {
    "resume": "PDF",
    "avatar": "JPG, PNG, GIF, WEBP",
    "marksheet": "PDF, JPG, PNG, GIF, WEBP",
}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def count_pdf_pages(content: bytes) -> int:
    """Parse PDF bytes and return the page count. Raises BadRequestError."""
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = len(reader.pages)
    except Exception as e:
        raise BadRequestError(f"Error reading PDF: {str(e)}")
    if pages == 0:
        raise BadRequestError("PDF has no pages")
    return pages


def validate_upload(file: Optional[UploadFile], kind: str, content: bytes, settings: Settings) -> Optional[int]:
    """
    Validate an upload against the rules for `kind`.

    Returns:
        Page count for PDFs, None for images.
    """
    if file is None or not file.filename:
        raise BadRequestError(f"Please upload a {kind} file")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS[kind]:
        raise BadRequestError(f"Unsupported file type '{ext}'. Allowed: {KIND_LABELS[kind]}")

    # browsers sometimes omit the type; the extension check above still applies
    if file.content_type and file.content_type not in ALLOWED_MIMETYPES[kind] \
            and file.content_type != "application/octet-stream":
        raise BadRequestError(f"Unsupported content type '{file.content_type}'. Allowed: {KIND_LABELS[kind]}")

    if not content:
        raise BadRequestError("Uploaded file is empty")

    if len(content) > settings.max_upload_bytes:
        raise PayloadTooLargeError(f"File too large. Maximum size: {settings.max_upload_mb}MB")

    if ext in PDF_EXTENSIONS:
        return count_pdf_pages(content)
    return None


async def save_upload(file: Optional[UploadFile], kind: str, settings: Settings = None) -> dict:
    """
    Validate and write an upload to disk.

    Returns:
        File metadata stored on the owning document:
        {filename, original_name, mimetype, size, path, pages, uploaded_at}
    """
    settings = settings or get_settings()
    # one byte past the cap is enough to reject; never buffer the whole body
    content = await file.read(settings.max_upload_bytes + 1) if file is not None else b""
    pages = validate_upload(file, kind, content, settings)

    ext = get_file_extension(file.filename)
    filename = f"{kind}-{uuid.uuid4().hex}{ext}"
    folder = os.path.join(settings.upload_dir, f"{kind}s")
    os.makedirs(folder, exist_ok=True)
    with open(os.path.join(folder, filename), "wb") as fh:
        fh.write(content)

    logger.info("Stored %s upload %s (%d bytes)", kind, filename, len(content))
    return {
        "filename": filename,
        "original_name": file.filename,
        "mimetype": file.content_type or "application/octet-stream",
        "size": len(content),
        "path": f"/uploads/{kind}s/{filename}",
        "pages": pages,
        "uploaded_at": datetime.utcnow(),
    }


def remove_stored_file(path: Optional[str], settings: Settings = None) -> None:
    """Delete a file by its public /uploads/... path; missing files are ignored."""
    if not path or not path.startswith("/uploads/"):
        return
    settings = settings or get_settings()
    relative = path.replace("/uploads/", "", 1)
    folder, filename = os.path.split(relative)
    try:
        os.remove(os.path.join(settings.upload_dir, folder, filename))
    except FileNotFoundError:
        pass


def remove_upload(meta: Optional[dict], settings: Settings = None) -> None:
    """Delete the file behind an upload metadata dict."""
    if not meta or not meta.get("filename"):
        return
    remove_stored_file(meta.get("path"), settings)
