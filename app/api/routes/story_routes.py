"""
Success Story Routes

GET /success-stories - List stories (newest first)
GET /success-stories/{id} - Get one story
POST /success-stories - Create story (multipart: quote, name, image, ...)
PUT /success-stories/{id} - Update story, optionally replace image
DELETE /success-stories/{id} - Delete story and its image
GET /success-stories/{id}/image - Serve the image
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
from app.schemas.schemas import SuccessStoryResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/success-stories", tags=["Success Stories"])

STORY_COLUMNS = """
    SELECT s.id, s.quote, s.name, s.role, s.company, s.rating, s.created_at, a.kind, a.url
    FROM success_stories s LEFT JOIN artifacts a ON a.id = s.image_artifact_id
"""


def image_download_url(story_id: int) -> str:
    return f"/api/success-stories/{story_id}/image"


def to_response(row: dict) -> SuccessStoryResponse:
    return SuccessStoryResponse(
        id=row["id"], quote=row["quote"], name=row["name"], role=row["role"],
        company=row["company"], rating=row["rating"], created_at=row["created_at"],
        image=public_url(row["kind"], row["url"], image_download_url(row["id"]))
    )


def parse_rating(rating: Optional[str]) -> Optional[int]:
    if not rating:
        return None
    try:
        value = int(rating)
    except ValueError:
        raise ValidationError("Rating must be a whole number between 1 and 5")
    if not 1 <= value <= 5:
        raise ValidationError("Rating must be a whole number between 1 and 5")
    return value


@router.get("", response_model=List[SuccessStoryResponse])
async def list_stories():
    return [to_response(r) for r in execute_raw_sql(STORY_COLUMNS + " ORDER BY s.id DESC")]


@router.get("/{story_id}", response_model=SuccessStoryResponse)
async def get_story(story_id: int):
    rows = execute_raw_sql(STORY_COLUMNS + " WHERE s.id = :id", {"id": story_id})
    if not rows:
        raise NotFoundError("Story not found")
    return to_response(rows[0])


@router.post("", response_model=MessageResponse, status_code=201)
async def create_story(
    quote: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    company: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    gateway: ArtifactGateway = Depends(get_artifact_gateway)
):
    if not quote or not name:
        raise ValidationError("Quote and name are required")
    if image is None or not image.filename:
        raise ValidationError("Image file is required")

    rating_value = parse_rating(rating)
    content, filename, mime_type = await read_upload(image, IMAGE_EXTENSIONS)

    with discard_on_failure(gateway) as uploaded, get_db_session() as db:
        artifact_id = save_upload(db, gateway, uploaded, "success_stories", content, filename, mime_type)
        result = db.execute(
            text("""
                INSERT INTO success_stories (quote, name, role, company, rating, image_artifact_id)
                VALUES (:quote, :name, :role, :company, :rating, :artifact_id)
                RETURNING id
            """),
            {
                "quote": quote, "name": name, "role": role or None, "company": company or None,
                "rating": rating_value, "artifact_id": artifact_id
            }
        )
        story_id = result.fetchone()[0]

    logger.info("Success story %s created", story_id)
    return MessageResponse(message="Story created!", id=story_id)


@router.put("/{story_id}", response_model=SuccessStoryResponse)
async def update_story(
    story_id: int,
    quote: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    company: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    gateway: ArtifactGateway = Depends(get_artifact_gateway)
):
    if not quote or not name:
        raise ValidationError("Quote and name are required")

    rating_value = parse_rating(rating)
    upload = None
    if image is not None and image.filename:
        upload = await read_upload(image, IMAGE_EXTENSIONS)

    old_reference = None
    with discard_on_failure(gateway) as uploaded, get_db_session() as db:
        row = db.execute(
            text("SELECT image_artifact_id FROM success_stories WHERE id = :id"),
            {"id": story_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Story not found")

        artifact_id = row[0]
        if upload is not None:
            artifact_id = save_upload(db, gateway, uploaded, "success_stories", *upload)

        db.execute(
            text("""
                UPDATE success_stories
                SET quote = :quote, name = :name, role = :role, company = :company,
                    rating = :rating, image_artifact_id = :artifact_id
                WHERE id = :id
            """),
            {
                "quote": quote, "name": name, "role": role or None, "company": company or None,
                "rating": rating_value, "artifact_id": artifact_id, "id": story_id
            }
        )
        if upload is not None and row[0] is not None:
            old_reference = load_artifact(db, row[0])
            delete_artifact(db, row[0])

    if old_reference is not None:
        gateway.discard(old_reference)

    return to_response(execute_raw_sql(STORY_COLUMNS + " WHERE s.id = :id", {"id": story_id})[0])


@router.delete("/{story_id}", response_model=MessageResponse)
async def delete_story(story_id: int, gateway: ArtifactGateway = Depends(get_artifact_gateway)):
    with get_db_session() as db:
        row = db.execute(
            text("SELECT image_artifact_id FROM success_stories WHERE id = :id"),
            {"id": story_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Story not found")

        reference = load_artifact(db, row[0])
        db.execute(text("DELETE FROM success_stories WHERE id = :id"), {"id": story_id})
        if row[0] is not None:
            delete_artifact(db, row[0])
        gateway.destroy(reference)

    return MessageResponse(message="Story deleted!")


@router.get("/{story_id}/image")
async def get_story_image(story_id: int, gateway: ArtifactGateway = Depends(get_artifact_gateway)):
    with get_db_session() as db:
        row = db.execute(
            text("SELECT image_artifact_id FROM success_stories WHERE id = :id"),
            {"id": story_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Story not found")
        reference = load_artifact(db, row[0])

    return artifact_response(gateway.retrieve(reference), disposition="inline")
