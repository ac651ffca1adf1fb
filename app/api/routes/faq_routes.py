"""
FAQ Routes

GET /faqs - List FAQs
GET /faqs/{faq_id} - Get one FAQ
POST /faqs - Create FAQ
PUT /faqs/{faq_id} - Update FAQ
DELETE /faqs/{faq_id} - Delete FAQ
"""

from fastapi import APIRouter
from sqlalchemy import text
from typing import List

from app.core.errors import NotFoundError, ValidationError
from app.db.database import get_db_session, execute_raw_sql
from app.schemas.schemas import FaqCreate, FaqResponse, MessageResponse

router = APIRouter(prefix="/faqs", tags=["FAQs"])


def require_question_and_answer(faq: FaqCreate) -> None:
    if not faq.question or not faq.answer:
        raise ValidationError("Question & Answer required")


@router.get("", response_model=List[FaqResponse])
async def list_faqs():
    return execute_raw_sql("SELECT id, question, answer FROM faqs ORDER BY id")


@router.get("/{faq_id}", response_model=FaqResponse)
async def get_faq(faq_id: int):
    rows = execute_raw_sql("SELECT id, question, answer FROM faqs WHERE id = :id", {"id": faq_id})
    if not rows:
        raise NotFoundError("FAQ not found")
    return rows[0]


@router.post("", response_model=MessageResponse, status_code=201)
async def create_faq(faq: FaqCreate):
    require_question_and_answer(faq)
    with get_db_session() as db:
        result = db.execute(
            text("INSERT INTO faqs (question, answer) VALUES (:question, :answer) RETURNING id"),
            {"question": faq.question, "answer": faq.answer}
        )
        faq_id = result.fetchone()[0]
    return MessageResponse(message="FAQ created!", id=faq_id)


@router.put("/{faq_id}", response_model=MessageResponse)
async def update_faq(faq_id: int, faq: FaqCreate):
    require_question_and_answer(faq)
    with get_db_session() as db:
        result = db.execute(
            text("UPDATE faqs SET question = :question, answer = :answer WHERE id = :id"),
            {"question": faq.question, "answer": faq.answer, "id": faq_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("FAQ not found")
    return MessageResponse(message="FAQ updated!", id=faq_id)


@router.delete("/{faq_id}", response_model=MessageResponse)
async def delete_faq(faq_id: int):
    with get_db_session() as db:
        result = db.execute(text("DELETE FROM faqs WHERE id = :id"), {"id": faq_id})
        if result.rowcount == 0:
            raise NotFoundError("FAQ not found")
    return MessageResponse(message="FAQ deleted!")
