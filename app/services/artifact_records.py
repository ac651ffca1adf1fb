"""
Artifact rows - persistence of ArtifactReference values in the artifacts table.

Owning records (registrations, partners, success stories) keep only the
artifact id; these helpers turn ids into references and back.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.schemas.schemas import ArtifactDescriptor, StorageKind
from app.services.storage import ArtifactGateway, ArtifactReference

logger = logging.getLogger(__name__)


def insert_artifact(db: Session, reference: ArtifactReference) -> int:
    result = db.execute(
        text("""
            INSERT INTO artifacts (category, kind, original_name, mime_type, data, path, url, provider_id)
            VALUES (:category, :kind, :original_name, :mime_type, :data, :path, :url, :provider_id)
            RETURNING id
        """),
        {
            "category": reference.category,
            "kind": reference.kind.value,
            "original_name": reference.original_name,
            "mime_type": reference.mime_type,
            "data": reference.data,
            "path": reference.path,
            "url": reference.url,
            "provider_id": reference.provider_id,
        }
    )
    return result.fetchone()[0]


def load_artifact(db: Session, artifact_id: Optional[int]) -> Optional[ArtifactReference]:
    if artifact_id is None:
        return None
    row = db.execute(
        text("""
            SELECT kind, category, original_name, mime_type, data, path, url, provider_id
            FROM artifacts WHERE id = :id
        """),
        {"id": artifact_id}
    ).mappings().fetchone()
    if not row:
        return None
    data = row["data"]
    return ArtifactReference(
        kind=row["kind"], category=row["category"], original_name=row["original_name"],
        mime_type=row["mime_type"], data=bytes(data) if data is not None else None,
        path=row["path"], url=row["url"], provider_id=row["provider_id"]
    )


def delete_artifact(db: Session, artifact_id: int) -> None:
    db.execute(text("DELETE FROM artifacts WHERE id = :id"), {"id": artifact_id})


def save_upload(db: Session, gateway: ArtifactGateway, uploaded: List[ArtifactReference],
                category: str, data: bytes, filename: str, mime_type: str) -> int:
    """Store the file, record it in `uploaded` for cleanup, insert its row."""
    reference = gateway.store(category, data, filename, mime_type)
    uploaded.append(reference)
    return insert_artifact(db, reference)


@contextmanager
def discard_on_failure(gateway: ArtifactGateway):
    """
    Collect references stored inside the block; if the block fails (including
    the surrounding transaction's commit), remove the stored files again.

    Usage:
        with discard_on_failure(gateway) as uploaded, get_db_session() as db:
            artifact_id = save_upload(db, gateway, uploaded, ...)
    """
    uploaded: List[ArtifactReference] = []
    try:
        yield uploaded
    except Exception:
        for reference in uploaded:
            logger.warning("Discarding %s upload after failed save", reference.category)
            gateway.discard(reference)
        raise


def describe(artifact_id: int, reference: ArtifactReference, download_url: str) -> ArtifactDescriptor:
    """Client-facing descriptor; remote artifacts expose their public URL."""
    url = reference.url if reference.kind == StorageKind.remote else download_url
    return ArtifactDescriptor(
        id=artifact_id, kind=reference.kind, original_name=reference.original_name,
        mime_type=reference.mime_type, url=url
    )


def public_url(kind: Optional[str], remote_url: Optional[str], download_url: str) -> Optional[str]:
    """URL a page can use for an owner's file given the joined artifact columns."""
    if kind is None:
        return None
    if kind == StorageKind.remote.value:
        return remote_url
    return download_url
