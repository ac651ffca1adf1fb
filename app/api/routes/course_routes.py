"""
Course Routes

GET /courses - List courses
GET /courses/{course_id} - Get course details
POST /courses - Create course
PUT /courses/{course_id} - Update course
DELETE /courses/{course_id} - Delete course
"""

from fastapi import APIRouter
from sqlalchemy import text
from typing import List, Optional, Union

from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db_session, execute_raw_sql
from app.schemas.schemas import CourseCreate, CourseResponse, MessageResponse

router = APIRouter(prefix="/courses", tags=["Courses"])


def join_features(features: Optional[Union[List[str], str]]) -> Optional[str]:
    """Features are stored as one comma-separated string."""
    if isinstance(features, list):
        return ",".join(f.strip() for f in features if f.strip())
    return features


def to_response(row: dict) -> CourseResponse:
    features = [f.strip() for f in (row["features"] or "").split(",") if f.strip()]
    return CourseResponse(**{**row, "features": features})


def course_params(course: CourseCreate) -> dict:
    if not course.title:
        raise ValidationError("Title required")
    return {
        "icon": course.icon, "title": course.title, "description": course.description,
        "full_description": course.full_description, "duration": course.duration,
        "level": course.level, "features": join_features(course.features)
    }


@router.get("", response_model=List[CourseResponse])
async def list_courses():
    return [to_response(r) for r in execute_raw_sql("SELECT * FROM courses ORDER BY id")]


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(course_id: int):
    rows = execute_raw_sql("SELECT * FROM courses WHERE id = :id", {"id": course_id})
    if not rows:
        raise NotFoundError("Course not found")
    return to_response(rows[0])


@router.post("", response_model=MessageResponse, status_code=201)
async def create_course(course: CourseCreate):
    params = course_params(course)
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO courses (icon, title, description, full_description, duration, level, features)
                VALUES (:icon, :title, :description, :full_description, :duration, :level, :features)
                RETURNING id
            """),
            params
        )
        course_id = result.fetchone()[0]
    return MessageResponse(message="Course created!", id=course_id)


@router.put("/{course_id}", response_model=MessageResponse)
async def update_course(course_id: int, course: CourseCreate):
    params = course_params(course)
    with get_db_session() as db:
        result = db.execute(
            text("""
                UPDATE courses SET icon = :icon, title = :title, description = :description,
                    full_description = :full_description, duration = :duration, level = :level,
                    features = :features
                WHERE id = :id
            """),
            {**params, "id": course_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Course not found")
    return MessageResponse(message="Course updated!", id=course_id)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(course_id: int):
    with get_db_session() as db:
        result = db.execute(text("DELETE FROM courses WHERE id = :id"), {"id": course_id})
        if result.rowcount == 0:
            raise NotFoundError("Course not found")
    return MessageResponse(message="Course deleted!")
