"""
Photo gallery, comment and upload endpoints.

Every route here requires a session identity. Mutations of existing photos and
comments are limited to their owner, and a refused mutation looks exactly like
one on a missing entity.
"""
from fastapi import APIRouter, Depends, Request, UploadFile, File, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from services.db import get_db
from services.auth import require_session
from services.authorization import (
    content_author, photo_delete_checker, comment_edit_checker, comment_delete_checker
)
from services.comment_aggregator import build_gallery, aggregate_comment
from services.errors import PhotoAppError, ValidationError, NotFoundError
from services.file_storage import storage, admit, check_content_type, read_upload, UploadCandidate
from services.identity import normalize_identity
from services.security import SecurityUtils
from schemas.photo import CommentText, CommentOut, PhotoOut, PhotoUploadResponse, MessageResponse
from dao.user_dao import UserDAO
from dao.photo_dao import PhotoDAO
from dao.comment_dao import CommentDAO, clean_comment_text

router = APIRouter()
logger = logging.getLogger(__name__)

def _internal_error(message: str, exc: Exception) -> PhotoAppError:
    logger.error(f"{message}: {exc}", exc_info=exc)
    return PhotoAppError(message, str(exc))

# ==========================================
# UPLOAD
# ==========================================

@router.post("/new", status_code=status.HTTP_201_CREATED, response_model=PhotoUploadResponse)
async def upload_photo(
    request: Request,
    photo: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    identity: str = Depends(require_session)
):
    """
    Upload a photo from the multipart field ``photo``.

    The file is admitted and written before the photo record is created; if
    the record cannot be created the written file is removed again.
    """
    owner_id = content_author(identity)
    client_ip = SecurityUtils.get_client_ip(request)

    if photo is None or not photo.filename:
        raise ValidationError("No photo file was uploaded")

    size = None
    try:
        # Type is settled from the declared header before any content is read
        check_content_type(photo.content_type)
        content = await read_upload(photo)
        size = len(content)
        admission = admit(UploadCandidate(filename=photo.filename, content_type=photo.content_type, size=size))
    except ValidationError as e:
        SecurityUtils.log_security_event(
            "upload_rejected",
            {"reason": getattr(e, "reason", None), "content_type": photo.content_type, "size": size},
            user_id=owner_id,
            client_ip=client_ip
        )
        raise

    await storage.save(admission.stored_name, content)

    try:
        new_photo = await PhotoDAO(db).create_photo(owner_id, admission.stored_name)
    except Exception as e:
        await db.rollback()
        removed = await storage.delete(admission.stored_name)
        logger.warning(f"Photo record creation failed; removed stored file {admission.stored_name}: {removed}")
        raise _internal_error("Error uploading photo", e)

    SecurityUtils.log_security_event(
        "photo_upload_success",
        {"photo_id": new_photo.id, "stored_name": new_photo.file_name, "file_size": size},
        user_id=owner_id,
        client_ip=client_ip
    )

    return PhotoUploadResponse(id=new_photo.id, stored_name=new_photo.file_name, timestamp=new_photo.date_time)

# ==========================================
# GALLERY
# ==========================================

@router.get("/{user_id}", response_model=List[PhotoOut])
async def get_user_photos(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    identity: str = Depends(require_session)
):
    """Gallery of ``user_id``, oldest photo first, each with its comment thread."""
    user_dao = UserDAO(db)
    try:
        user = await user_dao.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        photos = await PhotoDAO(db).list_by_user(user.id)
        return await build_gallery(photos, CommentDAO(db), user_dao, owner=user)
    except PhotoAppError:
        raise
    except Exception as e:
        raise _internal_error("Error fetching user photos", e)

@router.delete("/{photo_id}", response_model=MessageResponse)
async def delete_photo(
    photo_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: str = Depends(require_session)
):
    """Delete one of the caller's photos. Comments on it are left in place."""
    photo_id = normalize_identity(photo_id, "photo ID")
    dao = PhotoDAO(db)
    try:
        photo = await dao.get_by_id(photo_id)
        photo_delete_checker.enforce(request, identity, photo, photo_id)
        file_name = photo.file_name

        if not await dao.delete_owned(photo_id, identity):
            raise photo_delete_checker.deny()
    except PhotoAppError:
        raise
    except Exception as e:
        raise _internal_error("Error deleting photo", e)

    SecurityUtils.log_security_event(
        "photo_deleted",
        {"photo_id": photo_id, "file_name": file_name},
        user_id=identity,
        client_ip=SecurityUtils.get_client_ip(request)
    )
    return MessageResponse(message="Photo deleted successfully")

# ==========================================
# COMMENTS
# ==========================================

@router.post("/commentsOfPhoto/{photo_id}", response_model=CommentOut)
async def post_comment(
    photo_id: str,
    payload: Optional[CommentText] = None,
    db: AsyncSession = Depends(get_db),
    identity: str = Depends(require_session)
):
    """Add a comment by the session user to a photo."""
    author_id = content_author(identity)
    photo_id = normalize_identity(photo_id, "photo ID")
    text = clean_comment_text(payload.comment if payload else None)

    try:
        if not await PhotoDAO(db).get_by_id(photo_id):
            raise NotFoundError("Photo not found")

        comment = await CommentDAO(db).create_comment(photo_id, author_id, text)
        return await aggregate_comment(comment, UserDAO(db))
    except PhotoAppError:
        raise
    except Exception as e:
        raise _internal_error("Error posting comment", e)

@router.put("/comment/{comment_id}", response_model=CommentOut)
async def edit_comment(
    comment_id: str,
    request: Request,
    payload: Optional[CommentText] = None,
    db: AsyncSession = Depends(get_db),
    identity: str = Depends(require_session)
):
    """Replace the text of one of the caller's comments."""
    comment_id = normalize_identity(comment_id, "comment ID")
    text = clean_comment_text(payload.comment if payload else None)

    dao = CommentDAO(db)
    try:
        existing = await dao.get_by_id(comment_id)
        comment_edit_checker.enforce(request, identity, existing, comment_id)

        updated = await dao.edit_owned(comment_id, identity, text)
        if updated is None:
            raise comment_edit_checker.deny()
        return await aggregate_comment(updated, UserDAO(db))
    except PhotoAppError:
        raise
    except Exception as e:
        raise _internal_error("Error updating comment", e)

@router.delete("/comment/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: str = Depends(require_session)
):
    """Delete one of the caller's comments."""
    comment_id = normalize_identity(comment_id, "comment ID")
    dao = CommentDAO(db)
    try:
        existing = await dao.get_by_id(comment_id)
        comment_delete_checker.enforce(request, identity, existing, comment_id)

        if not await dao.delete_owned(comment_id, identity):
            raise comment_delete_checker.deny()
    except PhotoAppError:
        raise
    except Exception as e:
        raise _internal_error("Error deleting comment", e)

    SecurityUtils.log_security_event(
        "comment_deleted",
        {"comment_id": comment_id},
        user_id=identity,
        client_ip=SecurityUtils.get_client_ip(request)
    )
    return MessageResponse(message="Comment deleted successfully")
