import asyncio
import logging

from app.core.db import init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main() -> None:
  """Create the database schema."""

  logger.info("Creating tables")
  await init_db()
  logger.info("Tables created")


if __name__ == "__main__":
  asyncio.run(main())
