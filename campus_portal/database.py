import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

logger = logging.getLogger(__name__)

# Load .env from the project root, falling back to the working directory
current_dir = Path(__file__).resolve().parent  # campus_portal/
backend_dir = current_dir.parent
env_path = backend_dir / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
else:
    load_dotenv()

MONGO_URI = os.getenv("MONGO_URI")
DATABASE_NAME = os.getenv("DATABASE_NAME", "campus_portal")

client = None
db = None


async def connect_to_mongo():
    global client, db

    if not MONGO_URI:
        raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")

    client = AsyncIOMotorClient(MONGO_URI)
    db = client[DATABASE_NAME]
    await client.admin.command("ping")

    if "mongodb+srv" in MONGO_URI:
        logger.info("Connected to MongoDB Atlas (database=%s)", DATABASE_NAME)
    else:
        logger.info("Connected to MongoDB at %s (database=%s)", MONGO_URI, DATABASE_NAME)


async def close_mongo_connection():
    if client:
        client.close()
        logger.info("MongoDB connection closed")


async def init_indexes():
    """Create the indexes the job queries rely on."""
    await db.jobs.create_index("company_id")
    await db.jobs.create_index([("branches_eligible", 1), ("courses_eligible", 1)])
    await db.jobs.create_index("job_deadline")
    logger.info("MongoDB indexes created")


async def ping():
    if db is None:
        return False
    try:
        await db.command("ping")
        return True
    except Exception as e:
        logger.warning("MongoDB ping failed: %s", e)
        return False


def get_db():
    return db
