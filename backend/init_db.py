import asyncio
import os
from services.db import engine, Base
from models import user, photo  # important: force-load all models

async def init_models():
    """Initialize database models and tables."""
    print(f"Initializing database with URL: {engine.url.render_as_string(hide_password=True)}")
    print(f"Environment: {os.getenv('ENVIRONMENT', 'development')}")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            print("Database tables created successfully!")

            table_names = list(Base.metadata.tables.keys())
            print(f"Created tables: {table_names}")

    except Exception as e:
        print(f"Error initializing database: {e}")
        raise
    finally:
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(init_models())
