import asyncio
import logging
from app.db.session import engine
from app.db.base import Base
# Import all models to register with Base
import app.models.user
import app.models.request

logger = logging.getLogger(__name__)

async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(init_models())
