from typing import List, Optional
from sqlalchemy import delete
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.photo import Photo, utc_now

class PhotoDAO:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, photo_id: str) -> Optional[Photo]:
        result = await self.db.execute(select(Photo).where(Photo.id == photo_id))
        return result.scalars().first()

    async def list_by_user(self, user_id: str) -> List[Photo]:
        """Gallery order: oldest photo first."""
        result = await self.db.execute(
            select(Photo)
            .where(Photo.user_id == user_id)
            .order_by(Photo.date_time.asc(), Photo.pk.asc())
        )
        return list(result.scalars().all())

    async def create_photo(self, owner_id: str, file_name: str) -> Photo:
        photo = Photo(user_id=owner_id, file_name=file_name, date_time=utc_now())
        self.db.add(photo)
        await self.db.commit()
        await self.db.refresh(photo)
        return photo

    async def delete_owned(self, photo_id: str, requester_id: str) -> bool:
        """
        Delete a photo owned by ``requester_id``.

        Returns False both when the photo does not exist and when someone else
        owns it; callers must not tell the two apart.
        """
        result = await self.db.execute(
            select(Photo.pk).where(Photo.id == photo_id, Photo.user_id == requester_id)
        )
        pk = result.scalar_one_or_none()
        if pk is None:
            return False

        await self.db.execute(delete(Photo).where(Photo.pk == pk))
        await self.db.commit()
        return True
