"""
File Upload Utility - read multipart uploads and build download responses.

Supported uploads:
- CVs: PDF (.pdf), Word (.doc, .docx)
- Images (partner logos, story photos): .jpg .jpeg .png .gif .webp

Max file size: MAX_UPLOAD_MB (default 5MB)
"""

from typing import Optional, Set, Tuple

from fastapi import UploadFile
from fastapi.responses import RedirectResponse, Response

from app.core.config import get_settings
from app.core.errors import ValidationError
from app.services.storage import RetrievedArtifact, guess_mime_type

CV_EXTENSIONS = {'.pdf', '.doc', '.docx'}
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}

CV_MIME_TYPES = {
    '.pdf': 'application/pdf',
    '.doc': 'application/msword',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}


class FileTooLargeError(ValidationError):
    status_code = 413
    code = "file_too_large"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_upload(file: Optional[UploadFile], allowed_extensions: Set[str]) -> Tuple[bytes, str, str]:
    """
    Read and validate an uploaded file.

    Returns:
        Tuple of (content, original filename, MIME type)

    Raises:
        ValidationError for a missing/empty/unsupported file,
        FileTooLargeError when over the size limit
    """
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    ext = get_file_extension(file.filename)
    if ext not in allowed_extensions:
        allowed = ", ".join(sorted(allowed_extensions))
        raise ValidationError(f"Unsupported file type '{ext}'. Allowed: {allowed}")

    content = await file.read()

    max_bytes = get_settings().max_upload_bytes
    if len(content) > max_bytes:
        raise FileTooLargeError(f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB")
    if not content:
        raise ValidationError("Uploaded file is empty")

    mime_type = CV_MIME_TYPES.get(ext) or guess_mime_type(file.filename, file.content_type)
    return content, file.filename, mime_type


def artifact_response(artifact: RetrievedArtifact, disposition: str = "attachment") -> Response:
    """Stream the bytes with a download filename, or redirect to the remote URL."""
    if artifact.redirect_url:
        return RedirectResponse(artifact.redirect_url, status_code=302)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'{disposition}; filename="{artifact.filename}"'
        }
    )
