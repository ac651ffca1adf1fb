"""
Admin Routes

GET /admins - List admin accounts
POST /admins - Create admin account
POST /admins/login - Login and get JWT token
GET /admins/me - Get current admin info
"""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text
from typing import List

from app.core.errors import ValidationError
from app.db.database import get_db_session, execute_raw_sql
from app.core.auth import hash_password, verify_password, create_access_token, get_current_admin
from app.schemas.schemas import AdminCreate, AdminLogin, AdminResponse, TokenResponse, MessageResponse

router = APIRouter(prefix="/admins", tags=["Admins"])


@router.get("", response_model=List[AdminResponse])
async def list_admins():
    return execute_raw_sql("SELECT id, email FROM admins ORDER BY id")


@router.post("", response_model=MessageResponse, status_code=201)
async def create_admin(request: AdminCreate):
    """Create an admin account. The password is stored as a bcrypt hash."""
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id FROM admins WHERE email = :email"),
            {"email": request.email}
        )
        if result.fetchone():
            raise ValidationError("Email already exists")

        result = db.execute(
            text("INSERT INTO admins (email, password) VALUES (:email, :password) RETURNING id"),
            {"email": request.email, "password": hash_password(request.password)}
        )
        admin_id = result.fetchone()[0]

    return MessageResponse(message="Admin created!", id=admin_id)


@router.post("/login", response_model=TokenResponse)
async def login(request: AdminLogin):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, password FROM admins WHERE email = :email"),
            {"email": request.email}
        )
        admin = result.fetchone()

    if not admin or not verify_password(request.password, admin[1]):
        raise HTTPException(status_code=401, detail="Invalid email/password")

    token = create_access_token(data={"sub": str(admin[0]), "role": "admin"})
    return TokenResponse(access_token=token, id=admin[0])


@router.get("/me", response_model=AdminResponse)
async def get_me(admin: dict = Depends(get_current_admin)):
    """Get current authenticated admin's info."""
    return AdminResponse(**admin)
