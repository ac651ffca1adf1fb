"""
Registration Routes

POST /registrations - Register for a course with a CV upload
GET /registrations - List registrations (no file content)
GET /registrations/{id} - Get one registration
GET /registrations/{id}/cv - Download the CV
DELETE /registrations/{id} - Delete registration and its CV
"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile
from sqlalchemy import text
from typing import List, Optional

from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db_session, execute_raw_sql
from app.services.artifact_records import (
    delete_artifact, describe, discard_on_failure, load_artifact, save_upload
)
from app.services.notification_service import Notifier, get_notifier
from app.services.storage import ArtifactGateway, get_artifact_gateway
from app.utils.file_upload import CV_EXTENSIONS, artifact_response, read_upload
from app.schemas.schemas import RegistrationCreatedResponse, RegistrationResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registrations", tags=["Registrations"])

REGISTRATION_COLUMNS = """
    SELECT r.id, r.full_name, r.email, r.phone, r.roles, a.original_name AS cv_name, r.created_at
    FROM registrations r LEFT JOIN artifacts a ON a.id = r.cv_artifact_id
"""


@router.post("", response_model=RegistrationCreatedResponse, status_code=201)
async def create_registration(
    background_tasks: BackgroundTasks,
    fullName: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    roles: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    cv: Optional[UploadFile] = File(None, description="CV file (PDF, DOC or DOCX)"),
    gateway: ArtifactGateway = Depends(get_artifact_gateway),
    notifier: Notifier = Depends(get_notifier)
):
    """
    Register with a CV upload.

    Accepts both 'roles' and 'role' form fields. Full name, email and
    the CV file are required.
    """
    if not fullName or not email or cv is None or not cv.filename:
        raise ValidationError("Full name, email, and CV file are required")

    content, filename, mime_type = await read_upload(cv, CV_EXTENSIONS)

    with discard_on_failure(gateway) as uploaded, get_db_session() as db:
        existing = db.execute(
            text("SELECT id FROM registrations WHERE email = :email"),
            {"email": email}
        )
        if existing.fetchone():
            raise ValidationError("Email already exists")

        artifact_id = save_upload(db, gateway, uploaded, "registrations", content, filename, mime_type)
        result = db.execute(
            text("""
                INSERT INTO registrations (full_name, email, phone, roles, cv_artifact_id)
                VALUES (:full_name, :email, :phone, :roles, :cv_artifact_id)
                RETURNING id
            """),
            {
                "full_name": fullName, "email": email, "phone": phone,
                "roles": roles or role or "", "cv_artifact_id": artifact_id
            }
        )
        registration_id = result.fetchone()[0]

    logger.info("Registration %s created (%s)", registration_id, uploaded[0].kind.value)
    background_tasks.add_task(
        notifier.send_registration_welcome,
        {"id": registration_id, "full_name": fullName, "email": email}
    )

    return RegistrationCreatedResponse(
        id=registration_id,
        cv=describe(artifact_id, uploaded[0], f"/api/registrations/{registration_id}/cv")
    )


@router.get("", response_model=List[RegistrationResponse])
async def list_registrations():
    """Get all registrations, newest first. CV content is never included."""
    return execute_raw_sql(REGISTRATION_COLUMNS + " ORDER BY r.id DESC")


@router.get("/{registration_id}", response_model=RegistrationResponse)
async def get_registration(registration_id: int):
    rows = execute_raw_sql(REGISTRATION_COLUMNS + " WHERE r.id = :id", {"id": registration_id})
    if not rows:
        raise NotFoundError("Registration not found")
    return rows[0]


@router.get("/{registration_id}/cv")
async def download_cv(registration_id: int, gateway: ArtifactGateway = Depends(get_artifact_gateway)):
    """Download the CV as '<Full_Name>_CV<ext>' (or redirect to object storage)."""
    with get_db_session() as db:
        row = db.execute(
            text("SELECT full_name, cv_artifact_id FROM registrations WHERE id = :id"),
            {"id": registration_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Registration not found")
        reference = load_artifact(db, row[1])

    if reference is None:
        raise NotFoundError("CV file not found")

    full_name = row[0] or "CV"
    return artifact_response(gateway.retrieve(reference, display_name=f"{full_name}_CV"))


@router.delete("/{registration_id}", response_model=MessageResponse)
async def delete_registration(registration_id: int, gateway: ArtifactGateway = Depends(get_artifact_gateway)):
    """Delete a registration; its CV is removed from whichever backend holds it."""
    with get_db_session() as db:
        row = db.execute(
            text("SELECT cv_artifact_id FROM registrations WHERE id = :id"),
            {"id": registration_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Registration not found")

        reference = load_artifact(db, row[0])
        db.execute(text("DELETE FROM registrations WHERE id = :id"), {"id": registration_id})
        if row[0] is not None:
            delete_artifact(db, row[0])
        gateway.destroy(reference)

    return MessageResponse(message="Registration deleted!")
