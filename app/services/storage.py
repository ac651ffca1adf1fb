"""
Artifact Storage Gateway - one upload/download contract over three backends.

Backends:
1. embedded - raw bytes kept in the artifacts row
2. local    - file under <uploads_dir>/<category>/
3. remote   - S3-compatible object storage (R2, S3, MinIO)

The backend used for NEW uploads is decided once from StorageSettings.
Every stored reference carries its own kind, so downloads and deletes are
dispatched on the reference and keep working after the deployment policy
changes (e.g. local -> remote).
"""

import logging
import mimetypes
import os
import re
import secrets
import time
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, model_validator

from app.core.config import StorageSettings, get_settings
from app.core.errors import NotFoundError, StorageError, ValidationError
from app.schemas.schemas import StorageKind

logger = logging.getLogger(__name__)

# Used when the uploaded file has no extension
DEFAULT_EXTENSIONS = {
    "registrations": ".pdf",
    "partners": ".webp",
    "success_stories": ".webp",
}

CATEGORY_PATTERN = re.compile(r"^[a-z0-9_-]+$")
MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


# ============================================================
# REFERENCE / RESULT TYPES
# ============================================================

class ArtifactReference(BaseModel):
    """
    Everything needed to find a stored file again.
    Exactly one location field is populated, and it matches `kind`.
    """
    kind: StorageKind
    category: str
    original_name: str
    mime_type: str
    data: Optional[bytes] = None
    path: Optional[str] = None
    url: Optional[str] = None
    provider_id: Optional[str] = None

    @model_validator(mode="after")
    def check_location_matches_kind(self):
        expected = {
            StorageKind.embedded: self.data is not None,
            StorageKind.local: bool(self.path),
            StorageKind.remote: bool(self.url and self.provider_id),
        }
        populated = [
            self.data is not None,
            bool(self.path),
            bool(self.url or self.provider_id),
        ]
        if not expected[self.kind] or sum(populated) != 1:
            raise ValueError(f"Artifact reference of kind '{self.kind.value}' has inconsistent location fields")
        return self

    @property
    def extension(self) -> str:
        return os.path.splitext(self.original_name)[1].lower()


class RetrievedArtifact(BaseModel):
    """Bytes to stream back, or a URL to redirect to."""
    filename: str
    media_type: str
    content: Optional[bytes] = None
    redirect_url: Optional[str] = None


# ============================================================
# HELPERS
# ============================================================

def sanitize_filename(name: str) -> str:
    """Replace anything outside [a-zA-Z0-9.-] so the name is header-safe."""
    return re.sub(r"[^a-zA-Z0-9.-]", "_", name) or "file"


def guess_mime_type(filename: str, declared: Optional[str] = None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


def generate_filename(original_name: str, category: str) -> str:
    """<epoch millis>-<random hex><ext>, unique without coordination."""
    ext = os.path.splitext(original_name)[1].lower() or DEFAULT_EXTENSIONS.get(category, "")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"


# ============================================================
# BACKENDS
# ============================================================

class EmbeddedBackend:
    """Bytes live in the database row; nothing to write or delete elsewhere."""
    kind = StorageKind.embedded

    def store(self, category: str, data: bytes, original_name: str, mime_type: str) -> ArtifactReference:
        return ArtifactReference(
            kind=self.kind, category=category, original_name=original_name,
            mime_type=mime_type, data=data
        )

    def fetch(self, reference: ArtifactReference) -> bytes:
        return reference.data

    def destroy(self, reference: ArtifactReference) -> None:
        pass


class LocalBackend:
    """Files under the uploads root, partitioned by category."""
    kind = StorageKind.local

    def __init__(self, uploads_dir: str):
        self.root = Path(uploads_dir)

    def _resolve(self, relative_path: str) -> Path:
        """Resolve a stored path, refusing anything outside the uploads root."""
        root = self.root.resolve()
        candidate = (root / relative_path).resolve()
        if candidate == root or not candidate.is_relative_to(root):
            logger.warning("Rejected artifact path outside uploads root: %r", relative_path)
            raise NotFoundError("File not found")
        return candidate

    def store(self, category: str, data: bytes, original_name: str, mime_type: str) -> ArtifactReference:
        filename = generate_filename(original_name, category)
        directory = self.root / category
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(directory / filename, "xb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Could not write {category}/{filename}: {e}") from e

        logger.info("Stored %s upload on disk: %s/%s", category, category, filename)
        return ArtifactReference(
            kind=self.kind, category=category, original_name=original_name,
            mime_type=mime_type, path=f"{category}/{filename}"
        )

    def fetch(self, reference: ArtifactReference) -> bytes:
        path = self._resolve(reference.path)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError("File not found") from e
        except OSError as e:
            raise StorageError(f"Could not read {reference.path}: {e}") from e

    def destroy(self, reference: ArtifactReference) -> None:
        try:
            path = self._resolve(reference.path)
            path.unlink()
        except NotFoundError:
            return
        except FileNotFoundError:
            logger.warning("Local artifact already gone: %s", reference.path)
        except OSError as e:
            logger.warning("Could not delete local artifact %s: %s", reference.path, e)


class RemoteBackend:
    """S3-compatible object storage. Objects are keyed <category>/<filename>."""
    kind = StorageKind.remote

    def __init__(self, config: StorageSettings, client=None):
        self.config = config
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.config.endpoint_url,
                aws_access_key_id=self.config.access_key_id,
                aws_secret_access_key=self.config.secret_access_key,
                region_name=self.config.region,
            )
        return self._client

    def store(self, category: str, data: bytes, original_name: str, mime_type: str) -> ArtifactReference:
        key = f"{category}/{generate_filename(original_name, category)}"
        try:
            self.client.put_object(
                Bucket=self.config.bucket,
                Key=key,
                Body=data,
                ContentType=mime_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Upload of {key} failed: {e}") from e

        logger.info("Uploaded %s artifact to object storage: %s", category, key)
        return ArtifactReference(
            kind=self.kind, category=category, original_name=original_name,
            mime_type=mime_type, url=f"{self.config.public_base_url}/{key}", provider_id=key
        )

    def fetch(self, reference: ArtifactReference) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.config.bucket, Key=reference.provider_id)
            return response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                raise NotFoundError("File not found") from e
            raise StorageError(f"Download of {reference.provider_id} failed: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Download of {reference.provider_id} failed: {e}") from e

    def destroy(self, reference: ArtifactReference) -> None:
        try:
            self.client.delete_object(Bucket=self.config.bucket, Key=reference.provider_id)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                logger.info("Remote artifact already deleted: %s", reference.provider_id)
                return
            raise StorageError(f"Delete of {reference.provider_id} failed: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Delete of {reference.provider_id} failed: {e}") from e
        logger.info("Deleted remote artifact: %s", reference.provider_id)


# ============================================================
# GATEWAY
# ============================================================

class ArtifactGateway:
    """
    Chooses a backend for new uploads and dispatches reads/deletes on the
    stored reference's kind.
    """

    def __init__(self, config: StorageSettings, s3_client=None):
        self.config = config
        self.backends: Dict[StorageKind, object] = {
            StorageKind.embedded: EmbeddedBackend(),
            StorageKind.local: LocalBackend(config.uploads_dir),
        }
        # Kept even when remote uploads are disabled so older remote
        # references can still be served and deleted.
        if config.has_remote_credentials or s3_client is not None:
            self.backends[StorageKind.remote] = RemoteBackend(config, client=s3_client)

    def backend_kind(self, category: str) -> StorageKind:
        if self.config.use_remote and StorageKind.remote in self.backends:
            return StorageKind.remote
        if category in self.config.embedded_categories:
            return StorageKind.embedded
        return StorageKind.local

    def _backend(self, kind: StorageKind):
        backend = self.backends.get(kind)
        if backend is None:
            raise StorageError(f"No '{kind.value}' storage backend is configured")
        return backend

    def store(self, category: str, data: bytes, original_name: str, mime_type: Optional[str] = None) -> ArtifactReference:
        if not CATEGORY_PATTERN.match(category):
            raise ValidationError(f"Invalid upload category '{category}'")
        backend = self._backend(self.backend_kind(category))
        return backend.store(category, data, original_name, guess_mime_type(original_name, mime_type))

    def retrieve(self, reference: Optional[ArtifactReference], display_name: Optional[str] = None) -> RetrievedArtifact:
        """
        Build a download for a stored reference.

        display_name, when given, replaces the original base name; the
        original extension is always kept.
        """
        if reference is None:
            raise NotFoundError("File not found")

        if display_name:
            filename = sanitize_filename(display_name) + reference.extension
        else:
            filename = sanitize_filename(reference.original_name)
        media_type = guess_mime_type(reference.original_name, reference.mime_type)

        if reference.kind == StorageKind.remote and self.config.remote_download_mode == "redirect":
            return RetrievedArtifact(filename=filename, media_type=media_type, redirect_url=reference.url)

        content = self._backend(reference.kind).fetch(reference)
        return RetrievedArtifact(filename=filename, media_type=media_type, content=content)

    def destroy(self, reference: Optional[ArtifactReference]) -> None:
        if reference is None:
            return
        self._backend(reference.kind).destroy(reference)

    def discard(self, reference: ArtifactReference) -> None:
        """Best-effort cleanup for an upload whose owning record was not saved."""
        try:
            self.destroy(reference)
        except StorageError as e:
            logger.error("Orphaned %s artifact could not be removed: %s", reference.kind.value, e)


@lru_cache()
def get_artifact_gateway() -> ArtifactGateway:
    """Get the process-wide gateway (FastAPI dependency)."""
    return ArtifactGateway(get_settings().storage)
