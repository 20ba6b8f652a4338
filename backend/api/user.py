from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from schemas.user import UserSummary, UserDetail
from services.db import get_db
from services.errors import PhotoAppError, ValidationError
from dao.user_dao import UserDAO
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/list", response_model=List[UserSummary])
async def list_users(db: AsyncSession = Depends(get_db)):
    """Users for sidebar navigation: only id and names, in insertion order."""
    try:
        rows = await UserDAO(db).list_summaries()
    except Exception as e:
        logger.error(f"Error fetching users list: {e}")
        raise PhotoAppError("Error fetching users list", str(e))
    return [UserSummary(id=row.id, first_name=row.first_name, last_name=row.last_name) for row in rows]

@router.get("/{user_id}", response_model=UserDetail)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    """Profile details of one user; malformed and unknown ids are both 400."""
    try:
        user = await UserDAO(db).get_by_id(user_id)
    except PhotoAppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching user details: {e}")
        raise PhotoAppError("Error fetching user details", str(e))

    if not user:
        raise ValidationError("User not found")

    return user

@router.get("/", response_model=List[UserDetail])
async def list_all_users(db: AsyncSession = Depends(get_db)):
    """Every user with full profile details."""
    try:
        return await UserDAO(db).list_all()
    except Exception as e:
        logger.error(f"Error fetching all users: {e}")
        raise PhotoAppError("Error fetching all users", str(e))
