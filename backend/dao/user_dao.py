from typing import Iterable, List, Optional
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.user import User
from services.identity import normalize_identity

class UserDAO:
    """Read-only identity store; users are provisioned outside this service."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Look up a user, rejecting malformed identities before the query."""
        user_id = normalize_identity(user_id, "user ID")
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def list_summaries(self):
        result = await self.db.execute(
            select(User.id, User.first_name, User.last_name).order_by(User.pk)
        )
        return result.all()

    async def list_all(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.pk))
        return list(result.scalars().all())

    async def get_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        """Fetch every user in ``user_ids`` with a single query; unknown ids are skipped."""
        ids = {user_id for user_id in user_ids}
        if not ids:
            return []
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return list(result.scalars().all())

    async def create_user(self, user: User):
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user
