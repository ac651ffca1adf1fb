"""
User Routes - registered users for the admin dashboard.

Read-only view over the registrations table.

GET /users - List registered users
GET /users/{user_id} - Get one user
"""

from fastapi import APIRouter
from typing import List

from app.api.routes.registration_routes import get_registration, list_registrations
from app.schemas.schemas import RegistrationResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[RegistrationResponse])
async def list_users():
    return await list_registrations()


@router.get("/{user_id}", response_model=RegistrationResponse)
async def get_user(user_id: int):
    return await get_registration(user_id)
