from typing import List, Optional
from sqlalchemy import delete
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.photo import Comment, utc_now
from services.errors import ValidationError

EMPTY_COMMENT_MESSAGE = "Comment cannot be empty"


def clean_comment_text(text: Optional[str]) -> str:
    """Trim comment text, rejecting empty or whitespace-only input."""
    if not isinstance(text, str) or not text.strip():
        raise ValidationError(EMPTY_COMMENT_MESSAGE)
    return text.strip()


class CommentDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, comment_id: str) -> Optional[Comment]:
        result = await self.db.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalars().first()

    async def list_by_photo(self, photo_id: str) -> List[Comment]:
        """Comments of one photo in the order they were stored."""
        result = await self.db.execute(
            select(Comment).where(Comment.photo_id == photo_id).order_by(Comment.pk)
        )
        return list(result.scalars().all())

    async def create_comment(self, photo_id: str, author_id: str, text: Optional[str]) -> Comment:
        text = clean_comment_text(text)
        comment = Comment(photo_id=photo_id, user_id=author_id, comment=text, date_time=utc_now())
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def get_owned(self, comment_id: str, requester_id: str) -> Optional[Comment]:
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id, Comment.user_id == requester_id)
        )
        return result.scalars().first()

    async def edit_owned(self, comment_id: str, requester_id: str,
                         new_text: Optional[str]) -> Optional[Comment]:
        """
        Replace the text of a comment written by ``requester_id``.

        Text is validated before the lookup. Returns None when the comment is
        missing or belongs to another user.
        """
        new_text = clean_comment_text(new_text)
        comment = await self.get_owned(comment_id, requester_id)
        if comment is None:
            return None

        comment.comment = new_text
        await self.db.commit()
        await self.db.refresh(comment)
        return comment

    async def delete_owned(self, comment_id: str, requester_id: str) -> bool:
        comment = await self.get_owned(comment_id, requester_id)
        if comment is None:
            return False

        await self.db.execute(delete(Comment).where(Comment.pk == comment.pk))
        await self.db.commit()
        return True
