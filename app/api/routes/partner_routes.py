"""
Partner Routes

GET /partners - List partners with logo URLs
POST /partners - Create partner (multipart: name + logo)
PUT /partners/{id} - Update name, optionally replace logo
DELETE /partners/{id} - Delete partner and its logo
GET /partners/{id}/logo - Serve the logo
"""

import logging
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import text
from typing import List, Optional

from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db_session, execute_raw_sql
from app.services.artifact_records import (
    delete_artifact, discard_on_failure, load_artifact, public_url, save_upload
)
from app.services.storage import ArtifactGateway, get_artifact_gateway
from app.utils.file_upload import IMAGE_EXTENSIONS, artifact_response, read_upload
from app.schemas.schemas import PartnerResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/partners", tags=["Partners"])


def logo_download_url(partner_id: int) -> str:
    return f"/api/partners/{partner_id}/logo"


@router.get("", response_model=List[PartnerResponse])
async def list_partners():
    rows = execute_raw_sql("""
        SELECT p.id, p.name, p.created_at, a.kind, a.url
        FROM partners p LEFT JOIN artifacts a ON a.id = p.logo_artifact_id
        ORDER BY p.id DESC
    """)
    return [
        PartnerResponse(
            id=r["id"], name=r["name"], created_at=r["created_at"],
            logo_url=public_url(r["kind"], r["url"], logo_download_url(r["id"]))
        ) for r in rows
    ]


@router.post("", response_model=PartnerResponse, status_code=201)
async def create_partner(
    name: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    gateway: ArtifactGateway = Depends(get_artifact_gateway)
):
    if not name:
        raise ValidationError("Name required")
    if logo is None or not logo.filename:
        raise ValidationError("Logo file is required")

    content, filename, mime_type = await read_upload(logo, IMAGE_EXTENSIONS)

    with discard_on_failure(gateway) as uploaded, get_db_session() as db:
        artifact_id = save_upload(db, gateway, uploaded, "partners", content, filename, mime_type)
        result = db.execute(
            text("INSERT INTO partners (name, logo_artifact_id) VALUES (:name, :artifact_id) RETURNING id"),
            {"name": name, "artifact_id": artifact_id}
        )
        partner_id = result.fetchone()[0]

    reference = uploaded[0]
    logger.info("Partner %s created with %s logo", partner_id, reference.kind.value)
    return PartnerResponse(
        id=partner_id, name=name,
        logo_url=public_url(reference.kind.value, reference.url, logo_download_url(partner_id))
    )


@router.put("/{partner_id}", response_model=MessageResponse)
async def update_partner(
    partner_id: int,
    name: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    gateway: ArtifactGateway = Depends(get_artifact_gateway)
):
    """Rename a partner; a new logo replaces (and deletes) the old one."""
    if not name:
        raise ValidationError("Name required")

    upload = None
    if logo is not None and logo.filename:
        upload = await read_upload(logo, IMAGE_EXTENSIONS)

    old_reference = None
    with discard_on_failure(gateway) as uploaded, get_db_session() as db:
        row = db.execute(
            text("SELECT logo_artifact_id FROM partners WHERE id = :id"),
            {"id": partner_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Partner not found")

        if upload is None:
            db.execute(text("UPDATE partners SET name = :name WHERE id = :id"), {"name": name, "id": partner_id})
        else:
            artifact_id = save_upload(db, gateway, uploaded, "partners", *upload)
            db.execute(
                text("UPDATE partners SET name = :name, logo_artifact_id = :artifact_id WHERE id = :id"),
                {"name": name, "artifact_id": artifact_id, "id": partner_id}
            )
            if row[0] is not None:
                old_reference = load_artifact(db, row[0])
                delete_artifact(db, row[0])

    if old_reference is not None:
        gateway.discard(old_reference)

    return MessageResponse(message="Partner updated!", id=partner_id)


@router.delete("/{partner_id}", response_model=MessageResponse)
async def delete_partner(partner_id: int, gateway: ArtifactGateway = Depends(get_artifact_gateway)):
    with get_db_session() as db:
        row = db.execute(
            text("SELECT logo_artifact_id FROM partners WHERE id = :id"),
            {"id": partner_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Partner not found")

        reference = load_artifact(db, row[0])
        db.execute(text("DELETE FROM partners WHERE id = :id"), {"id": partner_id})
        if row[0] is not None:
            delete_artifact(db, row[0])
        gateway.destroy(reference)

    return MessageResponse(message="Partner deleted!")


@router.get("/{partner_id}/logo")
async def get_partner_logo(partner_id: int, gateway: ArtifactGateway = Depends(get_artifact_gateway)):
    with get_db_session() as db:
        row = db.execute(
            text("SELECT logo_artifact_id FROM partners WHERE id = :id"),
            {"id": partner_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Partner not found")
        reference = load_artifact(db, row[0])

    return artifact_response(gateway.retrieve(reference), disposition="inline")
