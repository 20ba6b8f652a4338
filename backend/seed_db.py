"""
Load a handful of user profiles for local development.

Production users are provisioned by an external process; this script stands
in for it so the gallery and comment routes have someone to talk about.
"""
import asyncio
from sqlalchemy.future import select
from services.db import engine, SessionLocal, Base
from models.user import User
from models import photo  # noqa: F401  register photo/comment tables

SEED_USERS = [
    {"first_name": "Ian", "last_name": "Malcolm", "location": "Austin, TX",
     "description": "Should've stayed in the car.", "occupation": "Mathematician"},
    {"first_name": "Ellen", "last_name": "Ripley", "location": "Nostromo",
     "description": "Lucky one.", "occupation": "Warrant Officer"},
    {"first_name": "Peregrin", "last_name": "Took", "location": "Gondor",
     "description": "Home is behind, the world ahead.", "occupation": "Palantir Handler"},
    {"first_name": "Rey", "last_name": "Kenobi", "location": "D'Qar",
     "description": "Excited to be here!", "occupation": "Rebel"},
]

async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        existing = (await db.execute(select(User.first_name, User.last_name))).all()
        known = {(row.first_name, row.last_name) for row in existing}
        added = 0
        for profile in SEED_USERS:
            if (profile["first_name"], profile["last_name"]) in known:
                continue
            db.add(User(**profile))
            added += 1
        await db.commit()

        for row in (await db.execute(select(User.id, User.first_name, User.last_name).order_by(User.pk))).all():
            print(f"{row.id}  {row.first_name} {row.last_name}")
        print(f"Added {added} user(s)")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed())
